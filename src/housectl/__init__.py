"""housectl — shared-house membership and ledger management."""

__version__ = "0.1.0"
