"""formproof - proof-of-completion verification and points ledger."""

__version__ = "0.1.0"
