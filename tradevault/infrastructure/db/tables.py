"""
SQLAlchemy Core table definitions.

A single MetaData holds every table so the schema can be created with
`metadata.create_all(engine)` on PostgreSQL in production and on
SQLite in tests. Money and quantities are NUMERIC; timestamps are
stored and returned as timezone-aware UTC datetimes.
"""

from datetime import timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """DateTime that always comes back timezone-aware (UTC).

    SQLite drops tzinfo on the way in; this restores it on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


MONEY = Numeric(20, 8, asdecimal=True)


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("full_name", String(200), nullable=False),
    Column("email", String(320), nullable=False),
    Column("password_hash", String(200), nullable=False),
    Column("country", String(100), nullable=False, default=""),
    Column("phone", String(50), nullable=False, default=""),
    Column("address", String(300), nullable=False, default=""),
    Column("city", String(100), nullable=False, default=""),
    Column("state", String(100), nullable=False, default=""),
    Column("zip_code", String(20), nullable=False, default=""),
    Column("is_admin", Boolean, nullable=False, default=False),
    Column("status", String(20), nullable=False),
    Column("bonus", MONEY, nullable=False),
    Column("profit", MONEY, nullable=False),
    Column("created_at", UTCDateTime),
    Column("updated_at", UTCDateTime),
    UniqueConstraint("email", name="uix_users_email"),
)

kyc_records = Table(
    "kyc_records",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False),
    Column("name", String(200), nullable=False),
    Column("email", String(320), nullable=False),
    Column("id_type", String(50), nullable=False),
    Column("id_number", String(100), nullable=False),
    Column("front_image_url", String(1024), nullable=False),
    Column("front_image_id", String(255), nullable=False),
    Column("back_image_url", String(1024), nullable=False),
    Column("back_image_id", String(255), nullable=False),
    Column("status", String(20), nullable=False),
    Column("reviewed_at", UTCDateTime),
    Column("created_at", UTCDateTime, nullable=False),
    UniqueConstraint("user_id", name="uix_kyc_user"),
    UniqueConstraint("id_number", name="uix_kyc_id_number"),
)

holdings = Table(
    "holdings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("symbol", String(64), nullable=False),
    Column("asset_type", String(10), nullable=False),
    Column("name", String(200), nullable=False),
    Column("quantity", MONEY, nullable=False),
    Column("avg_purchase_price", MONEY, nullable=False),
    Column("total_invested", MONEY, nullable=False),
    Column("purchase_history", JSON, nullable=False),
    Column("currency", String(3), nullable=False),
    Column("version", Integer, nullable=False),
    Column("created_at", UTCDateTime),
    Column("updated_at", UTCDateTime),
    UniqueConstraint("user_id", "asset_type", "symbol", name="uix_holding_position"),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("reference", String(64), nullable=False),
    Column("user_id", String(36), nullable=False, index=True),
    Column("type", String(10), nullable=False),
    Column("asset_type", String(10), nullable=False),
    Column("symbol", String(64), nullable=False),
    Column("asset_name", String(200), nullable=False),
    Column("quantity", MONEY, nullable=False),
    Column("price", MONEY, nullable=False),
    Column("total_amount", MONEY, nullable=False),
    Column("fees", MONEY, nullable=False),
    Column("net_amount", MONEY, nullable=False),
    Column("cost_basis", MONEY),
    Column("realized_gain", MONEY),
    Column("status", String(10), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
)

wallets = Table(
    "wallets",
    metadata,
    Column("user_id", String(36), primary_key=True),
    Column("balance_usd", MONEY, nullable=False),
    Column("total_deposited", MONEY, nullable=False),
    Column("total_withdrawn", MONEY, nullable=False),
    Column("total_invested", MONEY, nullable=False),
    Column("withdrawal_limit", MONEY, nullable=False),
    Column("daily_withdrawn", MONEY, nullable=False),
    Column("last_withdrawal_reset", UTCDateTime),
    Column("currency", String(3), nullable=False),
    Column("version", Integer, nullable=False),
    Column("created_at", UTCDateTime),
    Column("updated_at", UTCDateTime),
)

wallet_entries = Table(
    "wallet_entries",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("reference", String(64), nullable=False),
    Column("user_id", String(36), nullable=False, index=True),
    Column("type", String(20), nullable=False),
    Column("amount", MONEY, nullable=False),
    Column("previous_balance", MONEY, nullable=False),
    Column("new_balance", MONEY, nullable=False),
    Column("source_id", String(64)),
    Column("description", Text, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
)

investment_plans = Table(
    "investment_plans",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("description", Text, nullable=False),
    Column("category", String(100), nullable=False),
    Column("risk_level", String(10), nullable=False),
    Column("nav", MONEY, nullable=False),
    Column("one_year_return", MONEY, nullable=False),
    Column("min_investment", MONEY, nullable=False),
    Column("is_featured", Boolean, nullable=False),
    Column("status", String(20), nullable=False),
    Column("created_at", UTCDateTime),
    Column("updated_at", UTCDateTime),
)

admin_prices = Table(
    "admin_prices",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("symbol", String(64), nullable=False, index=True),
    Column("price", MONEY, nullable=False),
    Column("reason", Text, nullable=False),
    Column("created_by", String(36), nullable=False),
    Column("is_active", Boolean, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
)

deposits = Table(
    "deposits",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("reference", String(64), nullable=False),
    Column("user_id", String(36), nullable=False, index=True),
    Column("amount", MONEY, nullable=False),
    Column("method", String(50), nullable=False),
    Column("transaction_hash", String(255), nullable=False),
    Column("proof_url", String(1024)),
    Column("status", String(20), nullable=False),
    Column("credited_at", UTCDateTime),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime),
)

withdrawals = Table(
    "withdrawals",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("reference", String(64), nullable=False),
    Column("user_id", String(36), nullable=False, index=True),
    Column("amount", MONEY, nullable=False),
    Column("method", String(20), nullable=False),
    Column("wallet_address", String(255)),
    Column("network", String(50)),
    Column("bank_name", String(200)),
    Column("account_number", String(64)),
    Column("routing_number", String(64)),
    Column("account_holder", String(200)),
    Column("cashtag", String(64)),
    Column("status", String(20), nullable=False),
    Column("tx_hash", String(255)),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime),
)

funding_requests = Table(
    "funding_requests",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("reference", String(64), nullable=False),
    Column("user_id", String(36), nullable=False, index=True),
    Column("currency", String(3), nullable=False),
    Column("amount", MONEY, nullable=False),
    Column("transaction_type", String(50), nullable=False),
    Column("name", String(200), nullable=False),
    Column("email", String(320), nullable=False),
    Column("image_urls", JSON, nullable=False),
    Column("status", String(20), nullable=False),
    Column("credited_at", UTCDateTime),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime),
    UniqueConstraint("reference", name="uix_funding_request_reference"),
)

loans = Table(
    "loans",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("reference", String(64), nullable=False),
    Column("user_id", String(36), nullable=False, index=True),
    Column("loan_type", String(50), nullable=False),
    Column("amount", MONEY, nullable=False),
    Column("term_months", Integer, nullable=False),
    Column("income", MONEY, nullable=False),
    Column("employment_status", String(50), nullable=False),
    Column("purpose", Text, nullable=False),
    Column("status", String(20), nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime),
)

cars = Table(
    "cars",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("full_name", String(300), nullable=False),
    Column("year", String(10), nullable=False),
    Column("price", MONEY, nullable=False),
    Column("description", Text, nullable=False),
    Column("range", String(50), nullable=False),
    Column("acceleration", String(50), nullable=False),
    Column("top_speed", String(50), nullable=False),
    Column("seating", Integer, nullable=False),
    Column("images", JSON, nullable=False),
    Column("features", JSON, nullable=False),
    Column("status", String(20), nullable=False),
    Column("is_featured", Boolean, nullable=False),
    Column("is_available", Boolean, nullable=False),
    Column("created_by", String(36), nullable=False),
    Column("created_at", UTCDateTime),
    Column("updated_at", UTCDateTime),
)

payment_methods = Table(
    "payment_methods",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(100), nullable=False),
    Column("code", String(20), nullable=False),
    Column("type", String(10), nullable=False),
    Column("description", Text, nullable=False),
    Column("network_fee", String(50), nullable=False),
    Column("wallet_address", String(255)),
    Column("is_active", Boolean, nullable=False),
    Column("created_at", UTCDateTime),
    UniqueConstraint("code", name="uix_payment_method_code"),
)

orders = Table(
    "orders",
    metadata,
    Column("order_id", String(40), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("car_id", String(36), nullable=False),
    Column("car_name", String(200), nullable=False),
    Column("payment_method", String(100), nullable=False),
    Column("payment_currency", String(20), nullable=False),
    Column("amount", MONEY, nullable=False),
    Column("crypto_amount", MONEY),
    Column("wallet_address", String(255)),
    Column("transaction_hash", String(255)),
    Column("billing", JSON, nullable=False),
    Column("status", String(20), nullable=False),
    Column("expires_at", UTCDateTime, nullable=False),
    Column("paid_at", UTCDateTime),
    Column("confirmed_at", UTCDateTime),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime),
)
