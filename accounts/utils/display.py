"""
Display helpers for the transaction history.

Dates render the way an en-US browser prints them with month, day, year,
12-hour time and zone name, e.g. ``Oct 17, 2026, 02:30:15 PM UTC``. Money
renders as ``BDT 1,234.00`` with the currency code taken from the
``DISPLAY_CURRENCY`` setting.
"""

from decimal import Decimal

from django.conf import settings
from django.utils import dateformat, timezone

from accounts.models import Transaction

NOT_AVAILABLE = "N/A"
DATE_FORMAT = "M j, Y, h:i:s A T"


def format_timestamp(value) -> str:
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return dateformat.format(value, DATE_FORMAT)


def format_money(amount) -> str:
    currency = getattr(settings, "DISPLAY_CURRENCY", "BDT")
    amount = Decimal(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency} {abs(amount):,.2f}"


def display_balance(transaction: Transaction, account) -> str:
    """
    Pick the balance figure to show for a history row seen from ``account``.

    A transfer shows the source balance to the sender and the destination
    balance to everyone else, falling back to N/A when the destination
    snapshot was never recorded.
    """
    if transaction.transaction_type == Transaction.TransactionType.TRANSFER:
        if transaction.account_id == account.pk:
            return format_money(transaction.balance)
        if transaction.to_balance is None:
            return NOT_AVAILABLE
        return format_money(transaction.to_balance)
    return format_money(transaction.balance)
