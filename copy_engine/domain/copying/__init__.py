"""Copying bounded context - leader trade replication.

Aggregates: CopyOrder, DelayedCopyOrder
Pure services: position sizing, risk validation, trading calendar
"""
