import logging

from django.db import transaction

from accounts.exceptions import Conflict, NotFound, ValidationFailed
from accounts.models import Account
from accounts.services.account import get_account, require_user

logger = logging.getLogger(__name__)


def _clean_id(beneficiary_id) -> str:
    beneficiary_id = str(beneficiary_id or "").strip()
    if not beneficiary_id:
        raise ValidationFailed("Invalid beneficiary id")
    return beneficiary_id


class BeneficiaryService:
    """
    Maintains the caller's list of beneficiary account UUIDs.

    The list lives on the caller's account only; adding someone as a
    beneficiary leaves their account untouched.
    """

    @staticmethod
    @transaction.atomic
    def add(user, beneficiary_id) -> Account:
        require_user(user)
        beneficiary_id = _clean_id(beneficiary_id)

        if not Account.objects.filter(uuid=beneficiary_id).exists():
            raise NotFound("No such account found")

        account = get_account(user, lock=True)
        if account.beneficiaries is None:
            account.beneficiaries = []

        if account.has_beneficiary(beneficiary_id):
            raise Conflict("Beneficiary already added")

        account.beneficiaries.append(beneficiary_id)
        account.save(update_fields=["beneficiaries", "updated_at"])

        logger.info("Beneficiary added: account=%s beneficiary=%s", account.uuid, beneficiary_id)
        return account

    @staticmethod
    def get_beneficiaries(user):
        """Return the beneficiary accounts of the user's account."""
        require_user(user)
        account = get_account(user)
        return Account.objects.filter(uuid__in=account.beneficiaries or [])

    @staticmethod
    @transaction.atomic
    def remove(user, beneficiary_id) -> Account:
        require_user(user)
        beneficiary_id = _clean_id(beneficiary_id)

        account = get_account(user, message="Source account not found", lock=True)
        if not account.has_beneficiary(beneficiary_id):
            raise NotFound("No such beneficiary found")

        account.beneficiaries = [
            existing for existing in account.beneficiaries if existing != beneficiary_id
        ]
        account.save(update_fields=["beneficiaries", "updated_at"])

        logger.info(
            "Beneficiary removed: account=%s beneficiary=%s", account.uuid, beneficiary_id
        )
        return account
