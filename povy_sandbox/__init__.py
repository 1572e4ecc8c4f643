"""Povy sandbox: test accounts, simulated payments and a transaction ledger."""
