from django.contrib import admin

from accounts.models import Account, Transaction


class ReadOnlyAdminMixin:
    """
    Mixin that makes an admin model completely read-only.
    Balances only move through the account services and the
    transaction log is append-only, so the admin just browses.
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Account)
class AccountAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "uuid", "user", "balance", "created_at", "updated_at")
    search_fields = ("uuid", "user__username")
    readonly_fields = ("uuid", "user", "balance", "beneficiaries", "created_at", "updated_at")


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "account",
        "to_account",
        "transaction_type",
        "amount",
        "balance",
        "to_balance",
        "created_at",
    )
    list_filter = ("transaction_type",)
    search_fields = ("account__uuid", "to_account__uuid", "user__username")
    readonly_fields = (
        "user",
        "to_user",
        "account",
        "to_account",
        "amount",
        "transaction_type",
        "balance",
        "to_balance",
        "created_at",
        "updated_at",
    )
