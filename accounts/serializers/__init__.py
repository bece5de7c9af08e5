from accounts.serializers.account import AccountSerializer
from accounts.serializers.deposit import DepositSerializer
from accounts.serializers.withdraw import WithdrawSerializer
from accounts.serializers.transfer import TransferSerializer
from accounts.serializers.beneficiary import BeneficiarySerializer
from accounts.serializers.transaction import (
    TransactionHistorySerializer,
    TransactionSerializer,
)

__all__ = [
    "AccountSerializer",
    "DepositSerializer",
    "WithdrawSerializer",
    "TransferSerializer",
    "BeneficiarySerializer",
    "TransactionSerializer",
    "TransactionHistorySerializer",
]
