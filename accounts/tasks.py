import logging

from celery import shared_task
from django.db import transaction

from accounts.models import Account, Transaction

logger = logging.getLogger(__name__)


def _compare_with_ledger(account_pk):
    """
    Return (account, latest transaction, snapshot) for one account.

    The account row is locked while the latest transaction is read, so a
    balance mutation cannot commit between the two reads.
    """
    with transaction.atomic():
        account = Account.objects.select_for_update().get(pk=account_pk)
        latest = Transaction.latest_for_account(account)
        expected = latest.snapshot_for(account) if latest is not None else None
    return account, latest, expected


@shared_task
def check_account_balances():
    """
    Periodic task: Compare every account's balance with the snapshot
    recorded on the latest transaction that touched it.

    Accounts without any transaction are skipped because their opening
    balance is set outside the transaction log. A flagged account is
    read once more before it is reported, so a balance change that landed
    mid-check is not mistaken for a mismatch. Mismatches are logged and
    returned; nothing is corrected automatically.

    Runs via Celery Beat every LEDGER_CHECK_INTERVAL seconds.
    """
    checked = 0
    mismatched = []

    account_pks = Account.objects.order_by("pk").values_list("pk", flat=True)
    for account_pk in account_pks.iterator():
        account, latest, expected = _compare_with_ledger(account_pk)
        if latest is None:
            continue

        checked += 1
        if expected == account.balance:
            continue

        account, latest, expected = _compare_with_ledger(account_pk)
        if expected != account.balance:
            logger.warning(
                "Balance mismatch: account=%s balance=%s snapshot=%s tx=%d",
                account.uuid,
                account.balance,
                expected,
                latest.id,
            )
            mismatched.append(str(account.uuid))

    if mismatched:
        logger.warning(
            "Ledger check found %d mismatched account(s) out of %d.",
            len(mismatched),
            checked,
        )
    else:
        logger.info("Ledger check passed for %d account(s).", checked)

    return {"checked": checked, "mismatched": mismatched}
