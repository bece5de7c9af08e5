from rest_framework import serializers


class AmountField(serializers.DecimalField):
    """
    Decimal amount that only accepts JSON numbers.

    Strings such as "100" and booleans are rejected even though they would
    coerce to a decimal.
    """

    default_error_messages = {
        "not_a_number": "Invalid amount",
        "invalid": "Invalid amount",
        "required": "Invalid amount",
        "null": "Invalid amount",
        "max_digits": "Invalid amount",
        "max_decimal_places": "Invalid amount",
        "max_whole_digits": "Invalid amount",
        "max_string_length": "Invalid amount",
    }

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 14)
        kwargs.setdefault("decimal_places", 2)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail("not_a_number")
        return super().to_internal_value(data)


class DepositSerializer(serializers.Serializer):
    """Validates deposit requests."""

    amount = AmountField()

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Invalid amount")
        return value
