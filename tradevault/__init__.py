"""
TradeVault: brokerage-style wallet, holdings and checkout backend.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - ledger: Holdings, transaction history, wallets, investment plans, market data.
    - funding: Deposits, withdrawals and loans.
    - accounts: Users, authentication, KYC.
    - checkout: Car catalog, payment methods, orders.
    - notifications: Outbound email queue.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (DB, HTTP APIs, SMTP) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
