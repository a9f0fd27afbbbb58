"""Celery tasks."""

from .copy_tasks import flush_delayed_copy_orders, replicate_leader_trade

__all__ = ["flush_delayed_copy_orders", "replicate_leader_trade"]
