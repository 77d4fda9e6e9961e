from django.db import models


class Seamstress(models.Model):
    """Seamstress (costureira) who receives cut pieces to sew"""
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True)
    specialty = models.CharField(max_length=200, blank=True)
    active = models.BooleanField(default=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'seamstresses'
        ordering = ['name']
