from enum import Enum


class Category(Enum):
    """The four scoring dimensions every stock and portfolio is rated on."""
    PERFORMANCE = "performance"
    STABILITY = "stability"
    VALUE = "value"
    MOMENTUM = "momentum"


class TradeErrorKind(Enum):
    """Machine-readable reason a ledger command was rejected."""
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_SHARES = "insufficient_shares"
    STOCK_NOT_FOUND = "stock_not_found"
    INVALID_PRICE = "invalid_price"


class TradeAction(Enum):
    """Ledger command type."""
    BUY = "buy"
    SELL = "sell"
