from rest_framework.views import APIView

from accounts.serializers import (
    AccountSerializer,
    TransactionSerializer,
    TransferSerializer,
)
from accounts.services import TransferService
from accounts.utils import envelope


class CreateTransferView(APIView):
    """
    POST /api/accounts/transfer — Send money to another user's account.

    Request body: {"to_user_id": <user id>, "amount": <positive number>}
    """

    def post(self, request, *args, **kwargs):
        serializer = TransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tx = TransferService.transfer(
            user=request.user,
            to_user_id=serializer.validated_data["to_user_id"],
            amount=serializer.validated_data["amount"],
        )

        return envelope(
            "Transfer successful",
            from_account=AccountSerializer(tx.account).data,
            to_account=AccountSerializer(tx.to_account).data,
            transaction=TransactionSerializer(tx).data,
        )
