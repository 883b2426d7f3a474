"""
HTTP surface of TradeVault.

One router per bounded context, mounted under /api/v1, plus the
shared dependency providers that wire use cases to adapters.
"""
