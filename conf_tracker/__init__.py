"""Conference deadline tracking and query-to-ranking engine."""

__version__ = "0.1.0"
