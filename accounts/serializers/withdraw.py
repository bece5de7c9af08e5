from accounts.serializers.deposit import DepositSerializer


class WithdrawSerializer(DepositSerializer):
    """Validates withdrawal requests. Balance is checked by the service."""
