import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounts.exceptions import Conflict, NotFound, Unauthorized, ValidationFailed
from accounts.models import Account, Transaction

logger = logging.getLogger(__name__)


def require_user(user):
    """Raise Unauthorized unless ``user`` is an authenticated user."""
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthorized()
    return user


def require_positive(amount):
    if amount is None or amount <= 0:
        raise ValidationFailed("Invalid amount")
    return amount


def require_capacity(account: Account, amount):
    """Raise Conflict if crediting ``amount`` would overflow the balance column."""
    if not account.can_receive(amount):
        logger.warning(
            "Credit rejected (balance limit): account=%s balance=%s amount=%s",
            account.uuid,
            account.balance,
            amount,
        )
        raise Conflict("Balance limit exceeded")


def get_account(user, message="Account not found", lock=False) -> Account:
    """Load the account owned by ``user``, optionally locking the row."""
    queryset = Account.objects.select_for_update() if lock else Account.objects
    account = queryset.filter(user=user).first()
    if account is None:
        raise NotFound(message)
    return account


def apply_delta(account: Account, delta) -> Account:
    """Shift the balance by ``delta`` with an F() update and reload it."""
    Account.objects.filter(pk=account.pk).update(
        balance=F("balance") + delta, updated_at=timezone.now()
    )
    account.refresh_from_db(fields=["balance", "updated_at"])
    return account


class AccountService:
    """
    Handles deposits and withdrawals against the caller's account.

    Each operation runs inside one database transaction and holds a
    row-level lock on the account, so the balance mutation and the
    transaction log entry are written together or not at all.
    """

    @staticmethod
    @transaction.atomic
    def deposit(user, amount) -> Transaction:
        """
        Deposit ``amount`` into the user's account.

        Returns:
            The created deposit Transaction; ``tx.account`` holds the
            updated balance.

        Raises:
            Unauthorized: If no authenticated user is given.
            ValidationFailed: If amount is not positive.
            NotFound: If the user has no account.
            Conflict: If the new balance would exceed the account limit.
        """
        require_user(user)
        require_positive(amount)

        account = get_account(user, lock=True)
        require_capacity(account, amount)
        apply_delta(account, amount)

        tx = Transaction.objects.create(
            user=user,
            account=account,
            amount=amount,
            transaction_type=Transaction.TransactionType.DEPOSIT,
            balance=account.balance,
        )

        logger.info(
            "Deposit completed: account=%s amount=%s new_balance=%s tx=%d",
            account.uuid,
            amount,
            account.balance,
            tx.id,
        )
        return tx

    @staticmethod
    @transaction.atomic
    def withdraw(user, amount) -> Transaction:
        """
        Withdraw ``amount`` from the user's account.

        Raises:
            Unauthorized: If no authenticated user is given.
            ValidationFailed: If amount is not positive.
            NotFound: If the user has no account.
            Conflict: If the balance does not cover the amount.
        """
        require_user(user)
        require_positive(amount)

        account = get_account(user, lock=True)

        if account.balance < amount:
            logger.warning(
                "Withdrawal rejected (insufficient funds): account=%s balance=%s "
                "amount=%s",
                account.uuid,
                account.balance,
                amount,
            )
            raise Conflict("Insufficient funds")

        apply_delta(account, -amount)

        tx = Transaction.objects.create(
            user=user,
            account=account,
            amount=amount,
            transaction_type=Transaction.TransactionType.WITHDRAW,
            balance=account.balance,
        )

        logger.info(
            "Withdrawal completed: account=%s amount=%s new_balance=%s tx=%d",
            account.uuid,
            amount,
            account.balance,
            tx.id,
        )
        return tx
