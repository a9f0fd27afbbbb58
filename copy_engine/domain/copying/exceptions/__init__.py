"""Copying domain exceptions."""

from .copying_exceptions import (
    CopyOrderNotFoundError,
    DuplicateCopyOrderError,
    GuardrailNotFoundError,
    InvalidCopyOrderStateError,
    InvalidCopyQuantityError,
    InvalidDelayedCopyStateError,
    InvalidGuardrailError,
    InvalidLeaderTradeError,
)

__all__ = [
    "CopyOrderNotFoundError",
    "DuplicateCopyOrderError",
    "GuardrailNotFoundError",
    "InvalidCopyOrderStateError",
    "InvalidCopyQuantityError",
    "InvalidDelayedCopyStateError",
    "InvalidGuardrailError",
    "InvalidLeaderTradeError",
]
