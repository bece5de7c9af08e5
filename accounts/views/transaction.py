import logging

from rest_framework.generics import ListAPIView

from accounts.models import Transaction
from accounts.serializers import TransactionHistorySerializer
from accounts.services.account import get_account
from accounts.utils import envelope

logger = logging.getLogger(__name__)


class TransactionListView(ListAPIView):
    """
    GET /api/accounts/transactions/ — Transaction history of the caller's account.

    Lists every transaction where the account is source or destination,
    newest first, with display_date and display_balance per row.

    Query params:
        - type: Filter by transaction type (deposit, withdraw, transfer)
    """

    serializer_class = TransactionHistorySerializer

    def get_account(self):
        if not hasattr(self, "_account"):
            self._account = get_account(self.request.user)
        return self._account

    def get_queryset(self):
        queryset = (
            Transaction.for_account(self.get_account())
            .select_related("account", "to_account")
            .order_by("-created_at", "-id")
        )

        tx_type = self.request.query_params.get("type")
        if tx_type:
            queryset = queryset.filter(transaction_type=tx_type.lower())

        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["account"] = self.get_account()
        return context

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return envelope(
            "Transactions fetched successfully",
            transactions=serializer.data,
        )
