import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ProductionOrder',
            fields=[
                ('id', models.CharField(max_length=20, primary_key=True, serialize=False)),
                ('reference_code', models.CharField(db_index=True, max_length=50)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('fabric', models.CharField(max_length=200)),
                ('grid_type', models.CharField(choices=[('STANDARD', 'Padrão (P-GG)'), ('PLUS', 'Plus Size (G1-G3)'), ('CUSTOM', 'Personalizada')], default='STANDARD', max_length=20)),
                ('items', models.JSONField(blank=True, default=list)),
                ('active_cutting_items', models.JSONField(blank=True, default=list)),
                ('splits', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('PLANNED', 'Planejado'), ('CUTTING', 'Em Corte'), ('SEWING', 'Na Costura'), ('FINISHED', 'Finalizado')], db_index=True, default='PLANNED', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, help_text='Order date; may be back-dated on creation')),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('finished_at', models.DateTimeField(blank=True, null=True)),
                ('reference', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='catalog.productreference')),
            ],
            options={
                'db_table': 'orders',
                'ordering': ['-created_at'],
            },
        ),
    ]
