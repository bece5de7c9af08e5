import logging

from rest_framework.views import APIView

from accounts.serializers import (
    AccountSerializer,
    DepositSerializer,
    TransactionSerializer,
)
from accounts.services import AccountService
from accounts.utils import envelope

logger = logging.getLogger(__name__)


class CreateDepositView(APIView):
    """
    POST /api/accounts/deposit — Deposit into the caller's account.

    Request body: {"amount": <positive number>}
    """

    def post(self, request, *args, **kwargs):
        serializer = DepositSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tx = AccountService.deposit(
            user=request.user,
            amount=serializer.validated_data["amount"],
        )

        return envelope(
            "Deposit successful",
            account=AccountSerializer(tx.account).data,
            transaction=TransactionSerializer(tx).data,
        )
