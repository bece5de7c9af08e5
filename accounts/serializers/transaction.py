from rest_framework import serializers

from accounts.models import Transaction
from accounts.utils import display_balance, format_timestamp


class TransactionSerializer(serializers.ModelSerializer):
    """Read-only serializer for transaction responses."""

    account_uuid = serializers.UUIDField(source="account.uuid", read_only=True)
    to_account_uuid = serializers.UUIDField(
        source="to_account.uuid", read_only=True, allow_null=True
    )

    class Meta:
        model = Transaction
        fields = (
            "id",
            "user_id",
            "to_user_id",
            "account_uuid",
            "to_account_uuid",
            "amount",
            "transaction_type",
            "balance",
            "to_balance",
            "created_at",
        )
        read_only_fields = fields


class TransactionHistorySerializer(TransactionSerializer):
    """
    Transaction row as seen from the account in ``context["account"]``.

    Adds a formatted creation date and the balance figure to show for
    that account.
    """

    display_date = serializers.SerializerMethodField()
    display_balance = serializers.SerializerMethodField()

    class Meta(TransactionSerializer.Meta):
        fields = TransactionSerializer.Meta.fields + (
            "display_date",
            "display_balance",
        )
        read_only_fields = fields

    def get_display_date(self, obj):
        return format_timestamp(obj.created_at)

    def get_display_balance(self, obj):
        return display_balance(obj, self.context["account"])
