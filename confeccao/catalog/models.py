from django.db import models


GRID_CHOICES = [
    ('STANDARD', 'Padrão (P-GG)'),
    ('PLUS', 'Plus Size (G1-G3)'),
    ('CUSTOM', 'Personalizada'),
]


class ProductReference(models.Model):
    """Catalog reference (modelo) used to plan production orders"""

    # Columns an older database schema may still lack; writes drop them
    # instead of failing (see confeccao.core.store).
    optional_columns = ('estimated_pieces_per_roll',)

    code = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255)
    default_fabric = models.CharField(max_length=200, blank=True)
    default_colors = models.JSONField(default=list, blank=True, help_text="List of {name, hex} colors offered for this reference")
    default_grid = models.CharField(max_length=20, choices=GRID_CHOICES, default='STANDARD')
    estimated_pieces_per_roll = models.PositiveIntegerField(null=True, blank=True, verbose_name='Estimativa Peças/Rolo')

    def __str__(self):
        return f"{self.code} - {self.description}"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'products'
        ordering = ['code']
