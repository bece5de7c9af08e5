import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

from accounts.models.base import BaseModel

BALANCE_MAX_DIGITS = 14
BALANCE_DECIMAL_PLACES = 2
MAX_BALANCE = Decimal("999999999999.99")


class Account(BaseModel):
    """
    A user's bank account.

    Balance is a decimal currency amount. Beneficiaries are stored as an
    ordered list of account UUID strings on the owning account only; the
    beneficiary's own record is not touched. Concurrency safety is handled at
    the service layer via select_for_update() and F() expressions.
    """

    uuid = models.UUIDField(
        default=uuid.uuid4, unique=True, editable=False, db_index=True
    )
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="account",
    )
    balance = models.DecimalField(
        max_digits=BALANCE_MAX_DIGITS,
        decimal_places=BALANCE_DECIMAL_PLACES,
        default=0,
    )
    beneficiaries = models.JSONField(
        default=list,
        blank=True,
        help_text="Ordered list of beneficiary account UUIDs.",
    )

    def __str__(self):
        return f"Account {self.uuid} (balance={self.balance})"

    def can_receive(self, amount) -> bool:
        return self.balance + amount <= MAX_BALANCE

    def has_beneficiary(self, beneficiary_id) -> bool:
        return str(beneficiary_id) in (self.beneficiaries or [])
