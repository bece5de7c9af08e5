import logging

from rest_framework.views import APIView

from accounts.serializers import AccountSerializer
from accounts.services.account import get_account
from accounts.utils import envelope

logger = logging.getLogger(__name__)


class AccountDetailView(APIView):
    """GET /api/accounts/me/ — The caller's account."""

    def get(self, request, *args, **kwargs):
        account = get_account(request.user)
        return envelope(
            "Account fetched successfully",
            account=AccountSerializer(account).data,
        )
