from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal


class Fabric(models.Model):
    """Fabric stock per (name, color), counted in rolls"""
    name = models.CharField(max_length=200, db_index=True)
    color = models.CharField(max_length=100)
    color_hex = models.CharField(max_length=7, default='#000000')
    stock_rolls = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    notes = models.TextField(blank=True, help_text="Free text; the cutting sheet prints it as the fabric code")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} - {self.color}"

    class Meta:
        db_table = 'fabrics'
        ordering = ['name', 'color']
