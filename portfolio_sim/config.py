"""
portfolio_sim/config.py
-----------------------
Shared numeric configuration for the scoring and ledger engines.

Keeping these separate from portfolio_sim/constants.py (which holds the
business tables) gives one place that owns the tunable tolerances.  The
ledger, the aggregator and the impact simulator all read the same values,
so a preview and the commit that follows it always agree on thresholds.
"""

# ---------------------------------------------------------------------------
# Starting balance
# ---------------------------------------------------------------------------
# Cash a fresh simulated portfolio is opened with when the caller does not
# supply its own amount.

DEFAULT_INITIAL_CASH: float = 100.0

# ---------------------------------------------------------------------------
# Numeric tolerances
# ---------------------------------------------------------------------------
# SHARE_EPSILON
#   Fractional shares come from dollar_amount / price, so a "sell everything"
#   request can differ from the held quantity in the last few bits.  A sell up
#   to held + SHARE_EPSILON is accepted, and any remainder below it is treated
#   as a closed position.
#
# VALUE_EPSILON
#   Dollar totals below this are treated as zero when they would otherwise be
#   used as a divisor (value-weighted scores, industry percentages).

SHARE_EPSILON: float = 1e-4
VALUE_EPSILON: float = 1e-9

# ---------------------------------------------------------------------------
# Score scale
# ---------------------------------------------------------------------------

SCORE_MIN: int = 0
SCORE_MAX: int = 100
NEUTRAL_SCORE: int = 50   # unrecognised labels and NaN inputs

# Impact deltas are reported to one decimal place.
DELTA_DECIMALS: int = 1
