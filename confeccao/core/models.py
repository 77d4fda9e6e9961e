from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Workshop staff account (managers and cutting room)"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Trail of catalog edits, stock movements and order lifecycle events"""
    ACTION_CHOICES = [
        ('create', 'Cadastro'),
        ('update', 'Alteração'),
        ('delete', 'Exclusão'),
        ('stock_add', 'Entrada de Estoque'),
        ('stock_cut', 'Baixa por Corte'),
        ('order_cutting', 'Enviado ao Corte'),
        ('order_cut_confirm', 'Corte Confirmado'),
        ('order_distribute', 'Peças Distribuídas'),
        ('split_finish', 'Pacote Finalizado'),
        ('order_finish', 'Pedido Finalizado'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Reference code, fabric and color, seamstress name")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Order number, e.g. #12")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_d1c2a8_idx'),
            models.Index(fields=['action'], name='audit_logs_action_8f1b3e_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__9a6f0b_idx'),
        ]

    def __str__(self):
        return f"{self.get_action_display()} {self.model_name} {self.object_reference or self.object_id}"
