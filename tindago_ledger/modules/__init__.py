"""Finance modules: commission, ledger, wallets and payouts."""
