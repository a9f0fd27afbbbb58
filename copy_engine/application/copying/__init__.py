"""Copying application layer - replication use cases."""
