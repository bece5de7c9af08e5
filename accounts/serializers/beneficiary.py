from rest_framework import serializers


class BeneficiarySerializer(serializers.Serializer):
    """Validates a beneficiary account UUID from the body or the URL."""

    beneficiary_id = serializers.UUIDField(
        error_messages={
            "required": "Invalid beneficiary id",
            "null": "Invalid beneficiary id",
            "invalid": "Invalid beneficiary id",
        }
    )
