"""Brokerage ports."""

from .brokerage_port import BrokeragePort

__all__ = ["BrokeragePort"]
