import logging

from rest_framework.views import APIView

from accounts.serializers import (
    AccountSerializer,
    TransactionSerializer,
    WithdrawSerializer,
)
from accounts.services import AccountService
from accounts.utils import envelope

logger = logging.getLogger(__name__)


class CreateWithdrawView(APIView):
    """
    POST /api/accounts/withdraw — Withdraw from the caller's account.

    Request body: {"amount": <positive number>}
    Fails with 400 when the balance does not cover the amount.
    """

    def post(self, request, *args, **kwargs):
        serializer = WithdrawSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tx = AccountService.withdraw(
            user=request.user,
            amount=serializer.validated_data["amount"],
        )

        return envelope(
            "Withdrawal successful",
            account=AccountSerializer(tx.account).data,
            transaction=TransactionSerializer(tx).data,
        )
