"""Funding bounded context: deposits, withdrawals and loans."""
