from django.urls import path

from accounts.views import (
    AccountDetailView,
    BeneficiaryDetailView,
    BeneficiaryListView,
    BeneficiaryView,
    CreateDepositView,
    CreateTransferView,
    CreateWithdrawView,
    TransactionListView,
)

urlpatterns = [
    path("me/", AccountDetailView.as_view(), name="account-detail"),
    path("deposit", CreateDepositView.as_view(), name="account-deposit"),
    path("withdraw", CreateWithdrawView.as_view(), name="account-withdraw"),
    path("transfer", CreateTransferView.as_view(), name="account-transfer"),
    path("beneficiary", BeneficiaryView.as_view(), name="beneficiary-create"),
    path("beneficiaries", BeneficiaryListView.as_view(), name="beneficiary-list"),
    path(
        "beneficiary/<str:beneficiary_id>",
        BeneficiaryDetailView.as_view(),
        name="beneficiary-delete",
    ),
    path("transactions/", TransactionListView.as_view(), name="account-transactions"),
]
