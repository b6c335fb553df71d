"""Point-of-sale, inventory and Khata ledger desktop app for a spare-parts shop."""

__version__ = "1.0.0"
