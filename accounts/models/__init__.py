from accounts.models.account import Account
from accounts.models.transaction import Transaction

__all__ = ["Account", "Transaction"]
