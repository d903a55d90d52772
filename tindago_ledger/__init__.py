"""TindaGo ledger server: commissions, store wallets and payouts."""

__version__ = "0.3.0"
