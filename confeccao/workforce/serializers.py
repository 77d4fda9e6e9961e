from rest_framework import serializers
from .models import Seamstress


class SeamstressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Seamstress
        fields = ['id', 'name', 'phone', 'specialty', 'active', 'address', 'city']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value
