import logging

from rest_framework.views import APIView

from accounts.serializers import AccountSerializer, BeneficiarySerializer
from accounts.services import BeneficiaryService
from accounts.utils import envelope

logger = logging.getLogger(__name__)


class BeneficiaryView(APIView):
    """
    POST /api/accounts/beneficiary — Add a beneficiary account.

    Request body: {"beneficiary_id": "<account uuid>"}
    """

    def post(self, request, *args, **kwargs):
        serializer = BeneficiarySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = BeneficiaryService.add(
            user=request.user,
            beneficiary_id=serializer.validated_data["beneficiary_id"],
        )
        return envelope(
            "Beneficiary added successfully",
            account=AccountSerializer(account).data,
        )


class BeneficiaryListView(APIView):
    """GET /api/accounts/beneficiaries — Accounts on the caller's beneficiary list."""

    def get(self, request, *args, **kwargs):
        beneficiaries = BeneficiaryService.get_beneficiaries(request.user)
        return envelope(
            "Beneficiaries fetched successfully",
            beneficiaries=AccountSerializer(beneficiaries, many=True).data,
        )


class BeneficiaryDetailView(APIView):
    """DELETE /api/accounts/beneficiary/<id> — Remove a beneficiary."""

    def delete(self, request, beneficiary_id, *args, **kwargs):
        serializer = BeneficiarySerializer(data={"beneficiary_id": beneficiary_id})
        serializer.is_valid(raise_exception=True)

        account = BeneficiaryService.remove(
            user=request.user,
            beneficiary_id=serializer.validated_data["beneficiary_id"],
        )
        return envelope(
            "Beneficiary deleted successfully",
            account=AccountSerializer(account).data,
        )
