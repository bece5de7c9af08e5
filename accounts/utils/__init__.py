from accounts.utils.display import display_balance, format_money, format_timestamp
from accounts.utils.responses import envelope

__all__ = ["display_balance", "format_money", "format_timestamp", "envelope"]
