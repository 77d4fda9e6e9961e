from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='ProductReference',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True)),
                ('description', models.CharField(max_length=255)),
                ('default_fabric', models.CharField(blank=True, max_length=200)),
                ('default_colors', models.JSONField(blank=True, default=list, help_text='List of {name, hex} colors offered for this reference')),
                ('default_grid', models.CharField(choices=[('STANDARD', 'Padrão (P-GG)'), ('PLUS', 'Plus Size (G1-G3)'), ('CUSTOM', 'Personalizada')], default='STANDARD', max_length=20)),
                ('estimated_pieces_per_roll', models.PositiveIntegerField(blank=True, null=True, verbose_name='Estimativa Peças/Rolo')),
            ],
            options={
                'db_table': 'products',
                'ordering': ['code'],
            },
        ),
    ]
