"""Claims Portal: expense-claim submission and review."""

__version__ = "0.1.0"
