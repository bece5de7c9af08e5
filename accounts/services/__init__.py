from accounts.services.account import AccountService
from accounts.services.transfer import TransferService
from accounts.services.beneficiary import BeneficiaryService

__all__ = ["AccountService", "TransferService", "BeneficiaryService"]
