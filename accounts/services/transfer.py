import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.exceptions import Conflict, NotFound, ValidationFailed
from accounts.models import Account, Transaction
from accounts.services.account import (
    apply_delta,
    require_capacity,
    require_positive,
    require_user,
)

logger = logging.getLogger(__name__)


class TransferService:
    """
    Moves money between two users' accounts.

    Both accounts are locked in primary-key order before either balance is
    read, which keeps two opposite transfers between the same pair from
    deadlocking. The debit, the credit and the log entry commit as one
    unit; if any step fails none of them is kept.
    """

    @staticmethod
    @transaction.atomic
    def transfer(user, to_user_id, amount) -> Transaction:
        """
        Transfer ``amount`` from ``user`` to the user with id ``to_user_id``.

        Returns:
            The created transfer Transaction. ``tx.account`` and
            ``tx.to_account`` carry the updated balances.

        Raises:
            Unauthorized: If no authenticated user is given.
            ValidationFailed: If the user id or amount is invalid.
            NotFound: If the destination user or either account is missing.
            Conflict: If the source is the destination, lacks funds, or the
                destination balance would exceed the account limit.
        """
        require_user(user)
        if not to_user_id:
            raise ValidationFailed("Invalid user id")
        require_positive(amount)

        to_user = get_user_model().objects.filter(pk=to_user_id).first()
        if to_user is None:
            raise NotFound("Invalid user id")

        if to_user.pk == user.pk:
            raise Conflict("Cannot transfer to your own account")

        locked = {
            account.user_id: account
            for account in Account.objects.select_for_update()
            .filter(user_id__in=[user.pk, to_user.pk])
            .order_by("pk")
        }
        from_account = locked.get(user.pk)
        to_account = locked.get(to_user.pk)

        if from_account is None:
            raise NotFound("Source account not found")
        if to_account is None:
            raise NotFound("Destination account not found")

        if from_account.balance < amount:
            logger.warning(
                "Transfer rejected (insufficient funds): from=%s to=%s "
                "balance=%s amount=%s",
                from_account.uuid,
                to_account.uuid,
                from_account.balance,
                amount,
            )
            raise Conflict("Insufficient funds")

        require_capacity(to_account, amount)

        apply_delta(from_account, -amount)
        apply_delta(to_account, amount)

        tx = Transaction.objects.create(
            user=user,
            to_user=to_user,
            account=from_account,
            to_account=to_account,
            amount=amount,
            transaction_type=Transaction.TransactionType.TRANSFER,
            balance=from_account.balance,
            to_balance=to_account.balance,
        )

        logger.info(
            "Transfer completed: from=%s to=%s amount=%s from_balance=%s "
            "to_balance=%s tx=%d",
            from_account.uuid,
            to_account.uuid,
            amount,
            from_account.balance,
            to_account.balance,
            tx.id,
        )
        return tx
