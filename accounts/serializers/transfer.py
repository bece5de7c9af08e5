from rest_framework import serializers

from accounts.serializers.deposit import AmountField, DepositSerializer


class TransferSerializer(DepositSerializer):
    """Validates transfer requests: destination user id plus amount."""

    to_user_id = serializers.IntegerField(
        min_value=1,
        error_messages={
            "required": "Invalid user id",
            "null": "Invalid user id",
            "invalid": "Invalid user id",
            "min_value": "Invalid user id",
        },
    )
    amount = AmountField()
