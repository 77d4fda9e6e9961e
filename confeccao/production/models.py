from django.db import models
from django.utils import timezone

from confeccao.catalog.models import GRID_CHOICES, ProductReference


PLANNED = 'PLANNED'
CUTTING = 'CUTTING'
SEWING = 'SEWING'
FINISHED = 'FINISHED'

STATUS_CHOICES = [
    (PLANNED, 'Planejado'),
    (CUTTING, 'Em Corte'),
    (SEWING, 'Na Costura'),
    (FINISHED, 'Finalizado'),
]

SPLIT_STATUS_CHOICES = [
    (SEWING, 'Na Costura'),
    (FINISHED, 'Finalizado'),
]


class ProductionOrder(models.Model):
    """
    Production order (pedido): one reference / fabric / grid being cut and sewn.

    Line items, cutting-room stock and seamstress splits are JSON documents
    owned by the order:

        items                 confirmed total cut, one entry per color
        active_cutting_items  pieces cut but not yet sent to a seamstress
        splits                packets handed to seamstresses

    Each entry of ``items`` / ``active_cutting_items`` has the keys color,
    color_hex, rolls_used, pieces_per_size_est, estimated_pieces,
    actual_pieces and sizes ({size: pieces}). A split has id, seamstress_id,
    seamstress_name, status, items, created_at and finished_at.

    Status only changes through confeccao.production.lifecycle.
    """
    id = models.CharField(max_length=20, primary_key=True)
    reference = models.ForeignKey(ProductReference, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    reference_code = models.CharField(max_length=50, db_index=True)
    description = models.CharField(max_length=255, blank=True)
    fabric = models.CharField(max_length=200)
    grid_type = models.CharField(max_length=20, choices=GRID_CHOICES, default='STANDARD')
    items = models.JSONField(default=list, blank=True)
    active_cutting_items = models.JSONField(default=list, blank=True)
    splits = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PLANNED, db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now, help_text="Order date; may be back-dated on creation")
    updated_at = models.DateTimeField(default=timezone.now)
    finished_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"#{self.id} - {self.reference_code}"

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
