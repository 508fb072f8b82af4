"""Identity resolution and entry ledger for gate access control."""

__version__ = "0.1.0"
