"""Sri Lanka personal income tax and audit-risk engine."""

__version__ = "0.1.0"
