"""Trade journal P&L and risk calculation engine."""

__version__ = "0.1.0"
