"""Copy Engine - replicates leader trades into follower orders."""

__version__ = "1.0.0"
