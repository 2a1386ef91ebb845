"""Customer DRF serializers (read side).

Input is parsed into ``CreateCustomerDTO`` by the view; the Service Layer
never sees a serializer.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Customer


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(read_only=True)
    city = serializers.CharField(read_only=True)
    state = serializers.CharField(read_only=True)
    zip_code = serializers.CharField(read_only=True)
    country = serializers.CharField(read_only=True)


class CustomerSerializer(serializers.ModelSerializer):
    address = AddressSerializer(source="*", read_only=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "first_name",
            "last_name",
            "email",
            "phone",
            "address",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
