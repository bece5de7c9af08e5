from accounts.views.account import AccountDetailView
from accounts.views.deposit import CreateDepositView
from accounts.views.withdraw import CreateWithdrawView
from accounts.views.transfer import CreateTransferView
from accounts.views.beneficiary import (
    BeneficiaryDetailView,
    BeneficiaryListView,
    BeneficiaryView,
)
from accounts.views.transaction import TransactionListView

__all__ = [
    "AccountDetailView",
    "CreateDepositView",
    "CreateWithdrawView",
    "CreateTransferView",
    "BeneficiaryView",
    "BeneficiaryListView",
    "BeneficiaryDetailView",
    "TransactionListView",
]
