"""
Ledger bounded context: domain layer.

- Holdings with weighted-average cost
- Append-only transaction history
- Wallet balances and wallet entries
- Investment plans, admin price overrides, market quotes
"""
