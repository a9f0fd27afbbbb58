"""Brokerage bounded context - port of the external brokerage integration."""
