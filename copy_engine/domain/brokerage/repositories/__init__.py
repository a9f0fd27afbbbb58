"""Brokerage repository ports."""

from .broker_connection_repository import BrokerConnectionRepository

__all__ = ["BrokerConnectionRepository"]
