from decimal import Decimal, InvalidOperation

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from accounts.models import Account
from accounts.models.account import MAX_BALANCE


class Command(BaseCommand):
    help = "Opens a bank account for an existing user"

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument(
            "--balance",
            default="0",
            help="Opening balance (default: 0)",
        )

    def handle(self, *args, **options):
        username = options["username"]
        try:
            balance = Decimal(options["balance"])
        except InvalidOperation:
            raise CommandError(f"Invalid balance: {options['balance']}")
        if balance < 0:
            raise CommandError("Opening balance cannot be negative.")
        if balance > MAX_BALANCE:
            raise CommandError(f"Opening balance cannot exceed {MAX_BALANCE}.")

        User = get_user_model()
        user = User.objects.filter(**{User.USERNAME_FIELD: username}).first()
        if user is None:
            raise CommandError(f"No such user: {username}")
        if Account.objects.filter(user=user).exists():
            raise CommandError(f"User {username} already has an account.")

        account = Account.objects.create(user=user, balance=balance)
        self.stdout.write(
            self.style.SUCCESS(f"Opened account {account.uuid} for {username}.")
        )
