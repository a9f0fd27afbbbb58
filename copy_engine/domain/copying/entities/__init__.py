"""Aggregates of the Copying bounded context."""

from .copy_order import CopyOrder
from .delayed_copy_order import DelayedCopyOrder

__all__ = ["CopyOrder", "DelayedCopyOrder"]
