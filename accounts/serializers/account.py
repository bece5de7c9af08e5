from rest_framework import serializers

from accounts.models import Account


class AccountSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Account
        fields = (
            "uuid",
            "user_id",
            "balance",
            "beneficiaries",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields
