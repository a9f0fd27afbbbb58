"""Domain layer - pure business logic of copy trading.

Bounded contexts:
- copying: leader trade replication, sizing, risk, copy order lifecycle
- brokerage: port and value objects of the brokerage integration
"""
