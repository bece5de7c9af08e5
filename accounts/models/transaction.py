from django.conf import settings
from django.db import models
from django.db.models import Q

from accounts.models.account import Account
from accounts.models.base import BaseModel


class Transaction(BaseModel):
    """
    Append-only record of every balance-affecting operation.

    ``balance`` is the owning account's balance right after the operation.
    Transfers also record the destination account and its resulting balance
    in ``to_balance``. Rows are never updated or deleted once written.
    """

    class TransactionType(models.TextChoices):
        DEPOSIT = "deposit", "Deposit"
        WITHDRAW = "withdraw", "Withdraw"
        TRANSFER = "transfer", "Transfer"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="transactions",
    )
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="incoming_transactions",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="transactions",
    )
    to_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="incoming_transactions",
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    transaction_type = models.CharField(
        max_length=10,
        choices=TransactionType.choices,
    )
    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Owning account balance after the operation.",
    )
    to_balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Destination account balance after a transfer.",
    )

    class Meta(BaseModel.Meta):
        indexes = [
            models.Index(fields=["account", "created_at"], name="idx_account_created"),
            models.Index(
                fields=["to_account", "created_at"], name="idx_to_account_created"
            ),
        ]

    def __str__(self):
        return (
            f"Transaction {self.id} | {self.transaction_type} | "
            f"{self.amount} | balance={self.balance}"
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Transactions are append-only and cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Transactions are append-only and cannot be deleted.")

    @classmethod
    def for_account(cls, account):
        """Return every transaction in which the account is source or destination."""
        return cls.objects.filter(Q(account=account) | Q(to_account=account))

    @classmethod
    def latest_for_account(cls, account):
        return cls.for_account(account).order_by("-created_at", "-id").first()

    def snapshot_for(self, account):
        """Balance the given account held right after this transaction."""
        if self.account_id == account.pk:
            return self.balance
        if self.to_account_id == account.pk:
            return self.to_balance
        return None
