"""Pure domain services of the Copying bounded context."""

from .position_sizing import (
    KELLY_LOOKBACK_DAYS,
    MOMENTUM_LOOKBACK_DAYS,
    MOMENTUM_MAX_TRADES,
    SAFE_DEFAULT_FRACTION,
    AllocationProposal,
    default_fraction,
    kelly_fraction,
    momentum_fraction,
    percentage_fraction,
    quantity_for_allocation,
    resolve_strategy,
    risk_parity_fraction,
)
from .risk_validator import DEFAULT_RISK_LIMITS, effective_guardrail_cap, validate_allocation
from .trading_calendar import next_cutoff, start_of_local_day

__all__ = [
    "KELLY_LOOKBACK_DAYS",
    "MOMENTUM_LOOKBACK_DAYS",
    "MOMENTUM_MAX_TRADES",
    "SAFE_DEFAULT_FRACTION",
    "AllocationProposal",
    "default_fraction",
    "kelly_fraction",
    "momentum_fraction",
    "percentage_fraction",
    "quantity_for_allocation",
    "resolve_strategy",
    "risk_parity_fraction",
    "DEFAULT_RISK_LIMITS",
    "effective_guardrail_cap",
    "validate_allocation",
    "next_cutoff",
    "start_of_local_day",
]
