from rest_framework import serializers

from .calculator import format_commission
from .models import Commission


class CommissionSerializer(serializers.ModelSerializer):
    property_title = serializers.CharField(source="property.title", read_only=True)
    agent_commission_display = serializers.SerializerMethodField()

    class Meta:
        model = Commission
        fields = [
            "id",
            "property",
            "property_title",
            "agent",
            "sale_amount",
            "total_commission",
            "platform_fee",
            "agent_commission",
            "agent_commission_display",
            "currency",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_agent_commission_display(self, obj):
        return format_commission(obj.agent_commission, obj.currency)
