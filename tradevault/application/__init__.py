"""
Use cases for TradeVault.

One class per operation, each exposing `execute()`. Use cases open a
unit of work per call, so every ledger, wallet and status change they
make commits or rolls back as one.
"""
