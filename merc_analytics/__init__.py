"""MERC Analytics - read-only holder, transfer and liquidity analytics for the MERC token."""

__version__ = "0.1.0"
