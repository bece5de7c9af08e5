import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.management import CommandError, call_command
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from accounts.exceptions import Conflict, NotFound, Unauthorized, ValidationFailed
from accounts.middleware import RequestResponseLoggingMiddleware
from accounts.models import Account, Transaction
from accounts.models.account import MAX_BALANCE
from accounts.services import AccountService, BeneficiaryService, TransferService
from accounts.utils import display_balance, format_money, format_timestamp

User = get_user_model()


def make_user(username, balance=None):
    """Create a user and, unless balance is None, an account for them."""
    user = User.objects.create_user(username=username, password="secret")
    if balance is not None:
        Account.objects.create(user=user, balance=balance)
    return user


# ============================================================
# Model Tests
# ============================================================


class AccountModelTest(TestCase):
    def setUp(self):
        self.user = make_user("alice")

    def test_create_account(self):
        account = Account.objects.create(user=self.user)
        self.assertIsNotNone(account.uuid)
        self.assertEqual(account.balance, 0)
        self.assertEqual(account.beneficiaries, [])
        self.assertIsNotNone(account.created_at)

    def test_account_str(self):
        account = Account.objects.create(user=self.user)
        self.assertIn(str(account.uuid), str(account))

    def test_one_account_per_user(self):
        Account.objects.create(user=self.user)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Account.objects.create(user=self.user)

    def test_has_beneficiary(self):
        target = uuid.uuid4()
        account = Account.objects.create(user=self.user, beneficiaries=[str(target)])
        self.assertTrue(account.has_beneficiary(target))
        self.assertFalse(account.has_beneficiary(uuid.uuid4()))


class TransactionModelTest(TestCase):
    def setUp(self):
        self.user = make_user("alice", balance=100)
        self.account = self.user.account

    def _deposit_row(self):
        return Transaction.objects.create(
            user=self.user,
            account=self.account,
            amount=100,
            transaction_type=Transaction.TransactionType.DEPOSIT,
            balance=100,
        )

    def test_create_deposit_transaction(self):
        tx = self._deposit_row()
        self.assertEqual(tx.transaction_type, "deposit")
        self.assertEqual(tx.amount, 100)
        self.assertIsNone(tx.to_account)
        self.assertIsNone(tx.to_balance)

    def test_transaction_cannot_be_updated(self):
        tx = self._deposit_row()
        tx.amount = 5
        with self.assertRaises(ValueError):
            tx.save()
        tx.refresh_from_db()
        self.assertEqual(tx.amount, 100)

    def test_transaction_cannot_be_deleted(self):
        tx = self._deposit_row()
        with self.assertRaises(ValueError):
            tx.delete()
        self.assertTrue(Transaction.objects.filter(pk=tx.pk).exists())

    def test_snapshot_for_transfer_sides(self):
        other = make_user("bob", balance=0)
        tx = Transaction.objects.create(
            user=self.user,
            to_user=other,
            account=self.account,
            to_account=other.account,
            amount=40,
            transaction_type=Transaction.TransactionType.TRANSFER,
            balance=60,
            to_balance=40,
        )
        self.assertEqual(tx.snapshot_for(self.account), 60)
        self.assertEqual(tx.snapshot_for(other.account), 40)

    def test_transaction_str(self):
        tx = self._deposit_row()
        self.assertIn("deposit", str(tx))
        self.assertIn("100", str(tx))


# ============================================================
# Service Tests
# ============================================================


class DepositServiceTest(TestCase):
    def setUp(self):
        self.user = make_user("alice", balance=0)

    def test_deposit_into_empty_account(self):
        tx = AccountService.deposit(self.user, Decimal("100"))

        account = Account.objects.get(user=self.user)
        self.assertEqual(account.balance, 100)
        self.assertEqual(tx.transaction_type, Transaction.TransactionType.DEPOSIT)
        self.assertEqual(tx.amount, 100)
        self.assertEqual(tx.balance, 100)
        self.assertEqual(Transaction.objects.count(), 1)

    def test_deposit_multiple(self):
        AccountService.deposit(self.user, Decimal("10.50"))
        tx = AccountService.deposit(self.user, Decimal("4.25"))

        self.assertEqual(Account.objects.get(user=self.user).balance, Decimal("14.75"))
        self.assertEqual(tx.balance, Decimal("14.75"))

    def test_deposit_non_positive_amount_raises(self):
        for amount in (0, Decimal("-100"), None):
            with self.assertRaises(ValidationFailed):
                AccountService.deposit(self.user, amount)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_deposit_without_account_raises(self):
        user = make_user("no-account")
        with self.assertRaises(NotFound):
            AccountService.deposit(user, Decimal("10"))

    def test_deposit_anonymous_raises(self):
        with self.assertRaises(Unauthorized):
            AccountService.deposit(AnonymousUser(), Decimal("10"))

    def test_deposit_past_balance_limit_is_rejected(self):
        Account.objects.filter(user=self.user).update(balance=Decimal("999999999999"))

        with self.assertRaises(Conflict) as ctx:
            AccountService.deposit(self.user, Decimal("999999999999"))

        self.assertEqual(str(ctx.exception.detail), "Balance limit exceeded")
        self.assertEqual(
            Account.objects.get(user=self.user).balance, Decimal("999999999999")
        )
        self.assertEqual(Transaction.objects.count(), 0)

    def test_deposit_up_to_balance_limit(self):
        Account.objects.filter(user=self.user).update(balance=Decimal("999999999999"))
        tx = AccountService.deposit(self.user, Decimal("0.99"))
        self.assertEqual(tx.balance, MAX_BALANCE)


class WithdrawServiceTest(TestCase):
    def setUp(self):
        self.user = make_user("alice", balance=100)

    def test_withdraw_success(self):
        tx = AccountService.withdraw(self.user, Decimal("50"))

        self.assertEqual(Account.objects.get(user=self.user).balance, 50)
        self.assertEqual(tx.transaction_type, Transaction.TransactionType.WITHDRAW)
        self.assertEqual(tx.balance, 50)

    def test_withdraw_more_than_balance_is_rejected(self):
        AccountService.withdraw(self.user, Decimal("50"))

        with self.assertRaises(Conflict) as ctx:
            AccountService.withdraw(self.user, Decimal("200"))

        self.assertEqual(str(ctx.exception.detail), "Insufficient funds")
        self.assertEqual(Account.objects.get(user=self.user).balance, 50)
        self.assertEqual(Transaction.objects.count(), 1)

    def test_withdraw_entire_balance(self):
        AccountService.withdraw(self.user, Decimal("100"))
        self.assertEqual(Account.objects.get(user=self.user).balance, 0)

    def test_withdraw_zero_amount_raises(self):
        with self.assertRaises(ValidationFailed):
            AccountService.withdraw(self.user, 0)


class TransferServiceTest(TestCase):
    def setUp(self):
        self.alice = make_user("alice", balance=300)
        self.bob = make_user("bob", balance=20)

    def test_transfer_success(self):
        tx = TransferService.transfer(self.alice, self.bob.pk, Decimal("120"))

        self.assertEqual(Account.objects.get(user=self.alice).balance, 180)
        self.assertEqual(Account.objects.get(user=self.bob).balance, 140)
        self.assertEqual(Transaction.objects.count(), 1)

        self.assertEqual(tx.transaction_type, Transaction.TransactionType.TRANSFER)
        self.assertEqual(tx.user, self.alice)
        self.assertEqual(tx.to_user, self.bob)
        self.assertEqual(tx.balance, 180)
        self.assertEqual(tx.to_balance, 140)
        self.assertEqual(tx.account.balance, 180)
        self.assertEqual(tx.to_account.balance, 140)

    def test_transfer_insufficient_funds(self):
        with self.assertRaises(Conflict):
            TransferService.transfer(self.alice, self.bob.pk, Decimal("300.01"))

        self.assertEqual(Account.objects.get(user=self.alice).balance, 300)
        self.assertEqual(Account.objects.get(user=self.bob).balance, 20)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_transfer_unknown_user(self):
        with self.assertRaises(NotFound) as ctx:
            TransferService.transfer(self.alice, 99999, Decimal("10"))
        self.assertEqual(str(ctx.exception.detail), "Invalid user id")

    def test_transfer_destination_without_account(self):
        carol = make_user("carol")
        with self.assertRaises(NotFound) as ctx:
            TransferService.transfer(self.alice, carol.pk, Decimal("10"))
        self.assertEqual(str(ctx.exception.detail), "Destination account not found")

    def test_transfer_source_without_account(self):
        carol = make_user("carol")
        with self.assertRaises(NotFound) as ctx:
            TransferService.transfer(carol, self.bob.pk, Decimal("10"))
        self.assertEqual(str(ctx.exception.detail), "Source account not found")

    def test_transfer_to_self_is_rejected(self):
        with self.assertRaises(Conflict):
            TransferService.transfer(self.alice, self.alice.pk, Decimal("10"))
        self.assertEqual(Account.objects.get(user=self.alice).balance, 300)

    def test_transfer_invalid_amount(self):
        with self.assertRaises(ValidationFailed):
            TransferService.transfer(self.alice, self.bob.pk, Decimal("-1"))

    def test_transfer_rolls_back_when_log_write_fails(self):
        with patch.object(
            Transaction.objects, "create", side_effect=RuntimeError("db down")
        ):
            with self.assertRaises(RuntimeError):
                TransferService.transfer(self.alice, self.bob.pk, Decimal("50"))

        self.assertEqual(Account.objects.get(user=self.alice).balance, 300)
        self.assertEqual(Account.objects.get(user=self.bob).balance, 20)

    def test_transfer_past_destination_balance_limit_is_rejected(self):
        Account.objects.filter(user=self.bob).update(balance=MAX_BALANCE)

        with self.assertRaises(Conflict) as ctx:
            TransferService.transfer(self.alice, self.bob.pk, Decimal("0.01"))

        self.assertEqual(str(ctx.exception.detail), "Balance limit exceeded")
        self.assertEqual(Account.objects.get(user=self.alice).balance, 300)
        self.assertEqual(Account.objects.get(user=self.bob).balance, MAX_BALANCE)
        self.assertEqual(Transaction.objects.count(), 0)


class BeneficiaryServiceTest(TestCase):
    def setUp(self):
        self.alice = make_user("alice", balance=0)
        self.bob = make_user("bob", balance=0)
        self.carol = make_user("carol", balance=0)

    def test_add_beneficiary(self):
        account = BeneficiaryService.add(self.alice, self.bob.account.uuid)

        self.assertEqual(account.beneficiaries, [str(self.bob.account.uuid)])
        # The beneficiary's own record is left untouched.
        self.assertEqual(Account.objects.get(user=self.bob).beneficiaries, [])

    def test_add_keeps_insertion_order(self):
        BeneficiaryService.add(self.alice, self.carol.account.uuid)
        account = BeneficiaryService.add(self.alice, self.bob.account.uuid)
        self.assertEqual(
            account.beneficiaries,
            [str(self.carol.account.uuid), str(self.bob.account.uuid)],
        )

    def test_add_duplicate_is_conflict(self):
        BeneficiaryService.add(self.alice, self.bob.account.uuid)
        with self.assertRaises(Conflict):
            BeneficiaryService.add(self.alice, self.bob.account.uuid)
        self.assertEqual(len(Account.objects.get(user=self.alice).beneficiaries), 1)

    def test_add_unknown_account(self):
        with self.assertRaises(NotFound):
            BeneficiaryService.add(self.alice, uuid.uuid4())

    def test_get_beneficiaries(self):
        BeneficiaryService.add(self.alice, self.bob.account.uuid)
        BeneficiaryService.add(self.alice, self.carol.account.uuid)

        accounts = BeneficiaryService.get_beneficiaries(self.alice)
        self.assertEqual(
            {a.uuid for a in accounts},
            {self.bob.account.uuid, self.carol.account.uuid},
        )

    def test_remove_beneficiary(self):
        BeneficiaryService.add(self.alice, self.bob.account.uuid)
        account = BeneficiaryService.remove(self.alice, self.bob.account.uuid)

        self.assertEqual(account.beneficiaries, [])
        self.assertEqual(Account.objects.get(user=self.alice).beneficiaries, [])

    def test_remove_non_member_is_not_found(self):
        with self.assertRaises(NotFound) as ctx:
            BeneficiaryService.remove(self.alice, self.bob.account.uuid)
        self.assertEqual(str(ctx.exception.detail), "No such beneficiary found")

    def test_remove_blank_id_is_invalid(self):
        with self.assertRaises(ValidationFailed):
            BeneficiaryService.remove(self.alice, "  ")


# ============================================================
# Display Tests
# ============================================================


class DisplayFormattingTest(SimpleTestCase):
    def test_format_money(self):
        self.assertEqual(format_money(Decimal("1234.5")), "BDT 1,234.50")
        self.assertEqual(format_money(0), "BDT 0.00")
        self.assertEqual(format_money(Decimal("-5")), "-BDT 5.00")

    @override_settings(DISPLAY_CURRENCY="USD")
    def test_format_money_uses_configured_currency(self):
        self.assertEqual(format_money(10), "USD 10.00")

    @override_settings(TIME_ZONE="UTC")
    def test_format_timestamp(self):
        value = datetime(2026, 10, 17, 14, 30, 15, tzinfo=dt_timezone.utc)
        self.assertEqual(format_timestamp(value), "Oct 17, 2026, 02:30:15 PM UTC")

    def _transfer(self, to_balance):
        return Transaction(
            transaction_type=Transaction.TransactionType.TRANSFER,
            account_id=1,
            to_account_id=2,
            amount=Decimal("10"),
            balance=Decimal("90"),
            to_balance=to_balance,
        )

    def test_transfer_seen_by_sender(self):
        tx = self._transfer(Decimal("60"))
        self.assertEqual(display_balance(tx, Account(id=1)), "BDT 90.00")

    def test_transfer_seen_by_receiver(self):
        tx = self._transfer(Decimal("60"))
        self.assertEqual(display_balance(tx, Account(id=2)), "BDT 60.00")

    def test_transfer_without_destination_balance(self):
        tx = self._transfer(None)
        self.assertEqual(display_balance(tx, Account(id=2)), "N/A")

    def test_deposit_shows_recorded_balance(self):
        tx = Transaction(
            transaction_type=Transaction.TransactionType.DEPOSIT,
            account_id=1,
            amount=Decimal("10"),
            balance=Decimal("110"),
        )
        self.assertEqual(display_balance(tx, Account(id=1)), "BDT 110.00")


# ============================================================
# API Tests
# ============================================================


class APITestBase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alice = make_user("alice", balance=100)
        self.bob = make_user("bob", balance=0)
        self.client.force_authenticate(user=self.alice)

    def assertEnvelope(self, response, status_code, success, message=None):
        self.assertEqual(response.status_code, status_code)
        self.assertEqual(response.data["success"], success)
        if message is not None:
            self.assertEqual(response.data["message"], message)


class AuthAPITest(APITestBase):
    def test_unauthenticated_requests_are_rejected(self):
        client = APIClient()
        for method, url in (
            ("post", "/api/accounts/deposit"),
            ("post", "/api/accounts/withdraw"),
            ("post", "/api/accounts/transfer"),
            ("post", "/api/accounts/beneficiary"),
            ("get", "/api/accounts/beneficiaries"),
            ("get", "/api/accounts/transactions/"),
            ("get", "/api/accounts/me/"),
            ("delete", f"/api/accounts/beneficiary/{self.bob.account.uuid}"),
        ):
            response = getattr(client, method)(url, {"amount": 10}, format="json")
            self.assertEnvelope(response, 401, False, "Unauthorized")
            self.assertIsNone(response.data["data"])

        self.assertEqual(Account.objects.get(user=self.alice).balance, 100)


class AccountAPITest(APITestBase):
    def test_retrieve_own_account(self):
        response = self.client.get("/api/accounts/me/")
        self.assertEnvelope(response, 200, True)
        self.assertEqual(
            response.data["data"]["account"]["uuid"], str(self.alice.account.uuid)
        )
        self.assertEqual(response.data["data"]["account"]["balance"], 100)

    def test_retrieve_without_account(self):
        self.client.force_authenticate(user=make_user("carol"))
        response = self.client.get("/api/accounts/me/")
        self.assertEnvelope(response, 404, False, "Account not found")


class DepositAPITest(APITestBase):
    def test_deposit_success(self):
        response = self.client.post(
            "/api/accounts/deposit", {"amount": 100}, format="json"
        )
        self.assertEnvelope(response, 200, True, "Deposit successful")
        self.assertEqual(response.data["data"]["account"]["balance"], 200)
        self.assertEqual(response.data["data"]["transaction"]["amount"], 100)
        self.assertEqual(
            response.data["data"]["transaction"]["transaction_type"], "deposit"
        )
        self.assertEqual(response.data["data"]["transaction"]["balance"], 200)

    def test_deposit_fractional_amount(self):
        response = self.client.post(
            "/api/accounts/deposit", {"amount": 0.75}, format="json"
        )
        self.assertEnvelope(response, 200, True)
        self.assertEqual(
            Account.objects.get(user=self.alice).balance, Decimal("100.75")
        )

    def test_deposit_invalid_amounts(self):
        for body in (
            {"amount": 0},
            {"amount": -1000},
            {"amount": "100"},
            {"amount": "abc"},
            {"amount": None},
            {"amount": True},
            {"amount": 0.001},
            {"amount": 1e13},
            {"amount": 12345678901234},
            {},
        ):
            response = self.client.post("/api/accounts/deposit", body, format="json")
            self.assertEnvelope(response, 422, False, "Invalid amount")

        self.assertEqual(Transaction.objects.count(), 0)
        self.assertEqual(Account.objects.get(user=self.alice).balance, 100)

    def test_deposit_without_account(self):
        self.client.force_authenticate(user=make_user("carol"))
        response = self.client.post(
            "/api/accounts/deposit", {"amount": 10}, format="json"
        )
        self.assertEnvelope(response, 404, False, "Account not found")

    def test_deposit_past_balance_limit(self):
        Account.objects.filter(user=self.alice).update(
            balance=Decimal("999999999999")
        )
        response = self.client.post(
            "/api/accounts/deposit", {"amount": 999999999999}, format="json"
        )
        self.assertEnvelope(response, 400, False, "Balance limit exceeded")
        self.assertEqual(
            Account.objects.get(user=self.alice).balance, Decimal("999999999999")
        )

    def test_unexpected_error_is_internal(self):
        with patch(
            "accounts.views.deposit.AccountService.deposit",
            side_effect=RuntimeError("connection reset"),
        ):
            response = self.client.post(
                "/api/accounts/deposit", {"amount": 10}, format="json"
            )
        self.assertEnvelope(response, 500, False, "Something went wrong")


class WithdrawAPITest(APITestBase):
    def test_withdraw_success(self):
        response = self.client.post(
            "/api/accounts/withdraw", {"amount": 50}, format="json"
        )
        self.assertEnvelope(response, 200, True, "Withdrawal successful")
        self.assertEqual(response.data["data"]["account"]["balance"], 50)
        self.assertEqual(
            response.data["data"]["transaction"]["transaction_type"], "withdraw"
        )

    def test_withdraw_insufficient_funds(self):
        response = self.client.post(
            "/api/accounts/withdraw", {"amount": 200}, format="json"
        )
        self.assertEnvelope(response, 400, False, "Insufficient funds")
        self.assertEqual(Account.objects.get(user=self.alice).balance, 100)

    def test_withdraw_negative_amount(self):
        response = self.client.post(
            "/api/accounts/withdraw", {"amount": -5}, format="json"
        )
        self.assertEnvelope(response, 422, False, "Invalid amount")


class TransferAPITest(APITestBase):
    def test_transfer_success(self):
        response = self.client.post(
            "/api/accounts/transfer",
            {"to_user_id": self.bob.pk, "amount": 40},
            format="json",
        )
        self.assertEnvelope(response, 200, True, "Transfer successful")
        data = response.data["data"]
        self.assertEqual(data["from_account"]["balance"], 60)
        self.assertEqual(data["to_account"]["balance"], 40)
        self.assertEqual(data["transaction"]["to_user_id"], self.bob.pk)
        self.assertEqual(data["transaction"]["to_balance"], 40)
        self.assertEqual(Transaction.objects.count(), 1)

    def test_transfer_insufficient_funds(self):
        response = self.client.post(
            "/api/accounts/transfer",
            {"to_user_id": self.bob.pk, "amount": 1000},
            format="json",
        )
        self.assertEnvelope(response, 400, False, "Insufficient funds")
        self.assertEqual(Transaction.objects.count(), 0)

    def test_transfer_past_destination_balance_limit(self):
        Account.objects.filter(user__in=[self.alice, self.bob]).update(
            balance=Decimal("999999999999")
        )
        response = self.client.post(
            "/api/accounts/transfer",
            {"to_user_id": self.bob.pk, "amount": 500000000000},
            format="json",
        )
        self.assertEnvelope(response, 400, False, "Balance limit exceeded")
        self.assertEqual(
            Account.objects.get(user=self.alice).balance, Decimal("999999999999")
        )
        self.assertEqual(Transaction.objects.count(), 0)

    def test_transfer_invalid_user_id(self):
        for to_user_id in ("abc", None, 0):
            response = self.client.post(
                "/api/accounts/transfer",
                {"to_user_id": to_user_id, "amount": 10},
                format="json",
            )
            self.assertEnvelope(response, 422, False, "Invalid user id")

    def test_transfer_unknown_user(self):
        response = self.client.post(
            "/api/accounts/transfer",
            {"to_user_id": 99999, "amount": 10},
            format="json",
        )
        self.assertEnvelope(response, 404, False, "Invalid user id")

    def test_transfer_invalid_amount(self):
        response = self.client.post(
            "/api/accounts/transfer",
            {"to_user_id": self.bob.pk, "amount": "10"},
            format="json",
        )
        self.assertEnvelope(response, 422, False, "Invalid amount")


class BeneficiaryAPITest(APITestBase):
    def _add(self, beneficiary_id):
        return self.client.post(
            "/api/accounts/beneficiary",
            {"beneficiary_id": str(beneficiary_id)},
            format="json",
        )

    def test_add_and_list(self):
        response = self._add(self.bob.account.uuid)
        self.assertEnvelope(response, 200, True, "Beneficiary added successfully")
        self.assertEqual(
            response.data["data"]["account"]["beneficiaries"],
            [str(self.bob.account.uuid)],
        )

        response = self.client.get("/api/accounts/beneficiaries")
        self.assertEnvelope(response, 200, True)
        beneficiaries = response.data["data"]["beneficiaries"]
        self.assertEqual(len(beneficiaries), 1)
        self.assertEqual(beneficiaries[0]["uuid"], str(self.bob.account.uuid))

    def test_add_duplicate(self):
        self._add(self.bob.account.uuid)
        response = self._add(self.bob.account.uuid)
        self.assertEnvelope(response, 400, False, "Beneficiary already added")

    def test_add_invalid_id(self):
        for value in ("", "not-a-uuid"):
            response = self._add(value)
            self.assertEnvelope(response, 422, False, "Invalid beneficiary id")

    def test_add_unknown_account(self):
        response = self._add(uuid.uuid4())
        self.assertEnvelope(response, 404, False, "No such account found")

    def test_delete(self):
        self._add(self.bob.account.uuid)
        response = self.client.delete(
            f"/api/accounts/beneficiary/{self.bob.account.uuid}"
        )
        self.assertEnvelope(response, 200, True, "Beneficiary deleted successfully")
        self.assertEqual(response.data["data"]["account"]["beneficiaries"], [])

    def test_delete_non_member(self):
        response = self.client.delete(
            f"/api/accounts/beneficiary/{self.bob.account.uuid}"
        )
        self.assertEnvelope(response, 404, False, "No such beneficiary found")

    def test_delete_invalid_id(self):
        response = self.client.delete("/api/accounts/beneficiary/nope")
        self.assertEnvelope(response, 422, False, "Invalid beneficiary id")


@override_settings(DISPLAY_CURRENCY="BDT")
class TransactionHistoryAPITest(APITestBase):
    def setUp(self):
        super().setUp()
        AccountService.deposit(self.alice, Decimal("50"))
        TransferService.transfer(self.alice, self.bob.pk, Decimal("30"))
        AccountService.withdraw(self.bob, Decimal("5"))

    def test_history_for_sender(self):
        response = self.client.get("/api/accounts/transactions/")
        self.assertEnvelope(response, 200, True)
        rows = response.data["data"]["transactions"]
        self.assertEqual(len(rows), 2)

        transfer = rows[0]
        self.assertEqual(transfer["transaction_type"], "transfer")
        self.assertEqual(transfer["display_balance"], "BDT 120.00")
        self.assertTrue(transfer["display_date"])

        deposit = rows[1]
        self.assertEqual(deposit["display_balance"], "BDT 150.00")

    def test_history_for_receiver(self):
        self.client.force_authenticate(user=self.bob)
        response = self.client.get("/api/accounts/transactions/")
        rows = response.data["data"]["transactions"]
        self.assertEqual(
            [row["transaction_type"] for row in rows], ["withdraw", "transfer"]
        )
        self.assertEqual(rows[1]["display_balance"], "BDT 30.00")
        self.assertEqual(rows[0]["display_balance"], "BDT 25.00")

    def test_filter_by_type(self):
        response = self.client.get("/api/accounts/transactions/?type=DEPOSIT")
        rows = response.data["data"]["transactions"]
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["transaction_type"], "deposit")


# ============================================================
# Celery Task Tests
# ============================================================


class LedgerCheckTaskTest(TestCase):
    def setUp(self):
        self.alice = make_user("alice", balance=0)
        self.bob = make_user("bob", balance=0)
        make_user("carol", balance=10)
        AccountService.deposit(self.alice, Decimal("100"))
        TransferService.transfer(self.alice, self.bob.pk, Decimal("40"))

    def test_consistent_ledger(self):
        from accounts.tasks import check_account_balances

        result = check_account_balances.apply()
        self.assertEqual(result.get(), {"checked": 2, "mismatched": []})

    def test_detects_mismatch(self):
        Account.objects.filter(user=self.bob).update(balance=Decimal("999"))

        from accounts.tasks import check_account_balances

        result = check_account_balances.apply()
        self.assertEqual(result.get()["mismatched"], [str(self.bob.account.uuid)])

    def test_deposit_during_check_is_not_reported(self):
        from accounts.tasks import check_account_balances

        latest_for_account = Transaction.latest_for_account
        deposited = []

        def latest_with_concurrent_deposit(account):
            # Commit a deposit after the balance was read but before the log is.
            if account.user_id == self.alice.pk and not deposited:
                deposited.append(AccountService.deposit(self.alice, Decimal("5")))
            return latest_for_account(account)

        with patch.object(
            Transaction,
            "latest_for_account",
            side_effect=latest_with_concurrent_deposit,
        ):
            result = check_account_balances.apply()

        self.assertEqual(len(deposited), 1)
        self.assertEqual(result.get(), {"checked": 2, "mismatched": []})


# ============================================================
# Management Command Tests
# ============================================================


class OpenAccountCommandTest(TestCase):
    def test_open_account(self):
        user = make_user("dave")
        call_command("open_account", "dave", balance="25.50")
        self.assertEqual(Account.objects.get(user=user).balance, Decimal("25.50"))

    def test_unknown_user(self):
        with self.assertRaises(CommandError):
            call_command("open_account", "nobody")

    def test_existing_account(self):
        make_user("erin", balance=0)
        with self.assertRaises(CommandError):
            call_command("open_account", "erin")


# ============================================================
# Middleware Tests
# ============================================================


class RequestLoggingMiddlewareTest(SimpleTestCase):
    def test_logs_request_and_response(self):
        middleware = RequestResponseLoggingMiddleware(
            lambda request: JsonResponse({"success": True})
        )
        request = RequestFactory().post(
            "/api/accounts/deposit", {"amount": 10}, content_type="application/json"
        )

        with self.assertLogs("accounts.middleware", level="INFO") as logs:
            response = middleware(request)

        self.assertEqual(response.status_code, 200)
        request_line, response_line = logs.output
        self.assertIn('API Request: POST /api/accounts/deposit Body: {"amount": 10}', request_line)
        self.assertNotIn("user=", request_line)
        self.assertIn("Status: 200", response_line)
        self.assertIn('{"success": true}', response_line)
