"""
API tests for trading, funding requests and checkout.

Decimal fields serialize as strings, so amounts are compared through
Decimal rather than by their exact text.
"""

from decimal import Decimal

import pytest

API = "/api/v1"
TX_HASH = "abcdef0123456789"


# ── Helpers ──────────────────────────────────────────────────────────


def _dec(value) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def funded_user(client, register, admin):
    """A registered user whose wallet holds 5000 USD."""
    user_id, headers = register()
    _, admin_headers = admin
    resp = client.post(
        f"{API}/wallet/{user_id}/adjust",
        json={"amount": "5000", "reason": "Opening balance"},
        headers=admin_headers,
    )
    assert resp.status_code == 200, resp.text
    return user_id, headers


def _balance(client, headers) -> Decimal:
    return _dec(client.get(f"{API}/wallet", headers=headers).json()["balance_usd"])


# ══════════════════════════════════════════════════════════════════════
# Holdings and wallet
# ══════════════════════════════════════════════════════════════════════


class TestTradingApi:
    def test_buy_then_sell_round_trip(self, client, funded_user) -> None:
        """Buying then selling through the API settles the wallet."""
        _, headers = funded_user
        buy = client.post(
            f"{API}/holdings/buy",
            json={
                "symbol": "aapl",
                "name": "Apple Inc.",
                "quantity": "10",
                "price": "100",
                "fees": "5",
            },
            headers=headers,
        )
        assert buy.status_code == 201, buy.text
        body = buy.json()
        assert body["holding"]["symbol"] == "AAPL"
        assert _dec(body["holding"]["avg_purchase_price"]) == Decimal("100.5")
        assert _dec(body["wallet_balance"]) == Decimal("3995")

        sell = client.post(
            f"{API}/holdings/sell",
            json={"symbol": "AAPL", "quantity": "10", "price": "110", "fees": "10"},
            headers=headers,
        )
        assert sell.status_code == 200, sell.text
        body = sell.json()
        assert body["holding"] is None
        assert _dec(body["transaction"]["realized_gain"]) == Decimal("85")
        assert _balance(client, headers) == Decimal("5085")

        history = client.get(f"{API}/transactions", headers=headers).json()
        assert sorted(t["type"] for t in history) == ["BUY", "SELL"]

    def test_buy_without_funds_is_rejected(self, client, register) -> None:
        """A buy the wallet cannot cover returns 400 and stores nothing."""
        _, headers = register()
        resp = client.post(
            f"{API}/holdings/buy",
            json={"symbol": "MSFT", "quantity": "1", "price": "300"},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Insufficient funds"
        assert client.get(f"{API}/holdings", headers=headers).json() == []

    def test_selling_unheld_symbol_fails(self, client, funded_user) -> None:
        """Selling a symbol that is not held returns 404."""
        _, headers = funded_user
        resp = client.post(
            f"{API}/holdings/sell",
            json={"symbol": "TSLA", "quantity": "1", "price": "200"},
            headers=headers,
        )
        assert resp.status_code == 404

    def test_negative_quantity_is_validation_error(self, client, funded_user) -> None:
        """A negative quantity is rejected by schema validation."""
        _, headers = funded_user
        resp = client.post(
            f"{API}/holdings/buy",
            json={"symbol": "AAPL", "quantity": "-1", "price": "100"},
            headers=headers,
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Validation error"
        assert "quantity" in body["detail"]

    def test_quantity_beyond_eight_places_is_validation_error(
        self, client, funded_user
    ) -> None:
        """A sub-scale quantity is refused before anything is stored."""
        _, headers = funded_user
        resp = client.post(
            f"{API}/holdings/buy",
            json={"symbol": "AAPL", "quantity": "0.000000004", "price": "100"},
            headers=headers,
        )
        assert resp.status_code == 400
        assert "quantity" in resp.json()["detail"]
        assert client.get(f"{API}/holdings", headers=headers).json() == []
        assert _balance(client, headers) == Decimal("5000")

    def test_portfolio_summary_uses_live_quotes(
        self, client, funded_user, market_data
    ) -> None:
        """Portfolio summary values holdings at the quoted price."""
        _, headers = funded_user
        client.post(
            f"{API}/holdings/buy",
            json={"symbol": "AAPL", "quantity": "10", "price": "100"},
            headers=headers,
        )
        market_data.prices["AAPL"] = Decimal("120")
        summary = client.get(f"{API}/portfolio/summary", headers=headers).json()
        assert _dec(summary["total_value"]) == Decimal("1200")
        assert _dec(summary["total_return"]) == Decimal("200")
        assert summary["positions"][0]["price_source"] == "market"

    def test_wallet_adjust_requires_admin(self, client, register) -> None:
        """Non-admins cannot adjust wallets."""
        user_id, headers = register()
        resp = client.post(
            f"{API}/wallet/{user_id}/adjust",
            json={"amount": "100", "reason": "Self-service"},
            headers=headers,
        )
        assert resp.status_code == 403


# ══════════════════════════════════════════════════════════════════════
# Deposits and withdrawals
# ══════════════════════════════════════════════════════════════════════


class TestFundingApi:
    def test_deposit_approval_flow(self, client, register, admin) -> None:
        """A deposit is listed for review and credits once on approval."""
        _, headers = register()
        _, admin_headers = admin
        created = client.post(
            f"{API}/deposits", json={"amount": "250", "method": "BTC"}, headers=headers
        )
        assert created.status_code == 201, created.text
        deposit_id = created.json()["id"]

        pending = client.get(
            f"{API}/deposits", params={"status": "pending"}, headers=admin_headers
        )
        assert [d["id"] for d in pending.json()] == [deposit_id]

        for _ in range(2):
            resp = client.put(
                f"{API}/deposits/{deposit_id}/status",
                json={"status": "approved"},
                headers=admin_headers,
            )
            assert resp.status_code == 200
        assert _balance(client, headers) == Decimal("250")

        mine = client.get(f"{API}/deposits/me", headers=headers).json()
        assert _dec(mine["total_approved"]) == Decimal("250")

        rejected = client.put(
            f"{API}/deposits/{deposit_id}/status",
            json={"status": "rejected"},
            headers=admin_headers,
        )
        assert rejected.status_code == 409

    def test_deposit_review_requires_admin(self, client, register) -> None:
        """Non-admins cannot approve deposits."""
        _, headers = register()
        deposit_id = client.post(
            f"{API}/deposits", json={"amount": "250", "method": "BTC"}, headers=headers
        ).json()["id"]
        resp = client.put(
            f"{API}/deposits/{deposit_id}/status",
            json={"status": "approved"},
            headers=headers,
        )
        assert resp.status_code == 403

    def test_withdrawal_reserves_and_refunds(self, client, funded_user, admin) -> None:
        """A withdrawal reserves funds and a failure refunds them."""
        _, headers = funded_user
        _, admin_headers = admin
        created = client.post(
            f"{API}/withdrawals",
            json={
                "amount": "1000",
                "method": "crypto",
                "wallet_address": "bc1qexample",
                "network": "BTC",
            },
            headers=headers,
        )
        assert created.status_code == 201, created.text
        assert _balance(client, headers) == Decimal("4000")

        failed = client.put(
            f"{API}/withdrawals/{created.json()['id']}/status",
            json={"status": "failed"},
            headers=admin_headers,
        )
        assert failed.status_code == 200
        assert _balance(client, headers) == Decimal("5000")

    def test_overdraft_withdrawal_rejected(self, client, funded_user) -> None:
        """A withdrawal above the balance returns 400 and stores nothing."""
        _, headers = funded_user
        resp = client.post(
            f"{API}/withdrawals",
            json={"amount": "9000", "method": "cashapp", "cashtag": "$alice"},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Insufficient funds"
        assert client.get(f"{API}/withdrawals/me", headers=headers).json() == []

    def test_loan_application_listed_for_owner(self, client, register) -> None:
        """A loan application is pending and listed for its owner."""
        _, headers = register()
        resp = client.post(
            f"{API}/loans",
            json={
                "loan_type": "personal",
                "amount": "1500",
                "term_months": 24,
                "income": "3000",
                "employment_status": "employed",
            },
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["status"] == "pending"
        assert len(client.get(f"{API}/loans/me", headers=headers).json()) == 1

    def test_funding_request_review_flow(self, client, register, admin) -> None:
        """A fiat request waits in the admin queue and credits once on approval."""
        _, headers = register()
        _, admin_headers = admin
        created = client.post(
            f"{API}/funding/requests",
            json={
                "currency": "GBP",
                "amount": "320",
                "transaction_type": "wire",
                "name": "Alice Doe",
                "email": "alice@example.com",
                "image_urls": ["https://img.test/funding/receipt.png"],
            },
            headers=headers,
        )
        assert created.status_code == 201, created.text
        request_id = created.json()["id"]
        assert created.json()["status"] == "pending"

        queue = client.get(
            f"{API}/funding/requests", params={"status": "pending"}, headers=admin_headers
        )
        assert [r["id"] for r in queue.json()] == [request_id]
        assert client.get(f"{API}/funding/requests", headers=headers).status_code == 403

        for _ in range(2):
            resp = client.post(
                f"{API}/funding/requests/{request_id}/approve", headers=admin_headers
            )
            assert resp.status_code == 200
        assert _balance(client, headers) == Decimal("320")

        rejected = client.post(
            f"{API}/funding/requests/{request_id}/reject", headers=admin_headers
        )
        assert rejected.status_code == 409
        mine = client.get(f"{API}/funding/requests/me", headers=headers).json()
        assert [r["status"] for r in mine] == ["approved"]

    def test_funding_request_unsupported_currency(self, client, register) -> None:
        """Only USD, EUR, GBP and JPY transfers are accepted."""
        _, headers = register()
        resp = client.post(
            f"{API}/funding/requests",
            json={
                "currency": "CHF",
                "amount": "100",
                "transaction_type": "wire",
                "name": "Alice Doe",
                "email": "alice@example.com",
            },
            headers=headers,
        )
        assert resp.status_code == 400


# ══════════════════════════════════════════════════════════════════════
# Checkout
# ══════════════════════════════════════════════════════════════════════


class TestCheckoutApi:
    @pytest.fixture
    def catalog(self, client, admin):
        _, admin_headers = admin
        car = client.post(
            f"{API}/cars",
            json={
                "name": "Model 3",
                "full_name": "Model 3 Long Range",
                "year": "2024",
                "price": "45000",
            },
            headers=admin_headers,
        )
        assert car.status_code == 201, car.text
        method = client.post(
            f"{API}/payment-methods",
            json={
                "name": "Bitcoin",
                "code": "BTC",
                "type": "crypto",
                "wallet_address": "bc1qshop",
            },
            headers=admin_headers,
        )
        assert method.status_code == 201, method.text
        return car.json()["id"]

    def _order(self, client, headers, car_id: str):
        return client.post(
            f"{API}/orders",
            json={
                "car_id": car_id,
                "payment_method": "BTC",
                "billing": {
                    "name": "Alice Doe",
                    "email": "alice@example.com",
                    "phone": "555-010-2030",
                    "address": "1 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "postal_code": "62701",
                    "country": "US",
                    "terms_accepted": True,
                },
            },
            headers=headers,
        )

    def test_order_payment_and_confirmation(self, client, register, admin, catalog) -> None:
        """An order moves from pending to paid to confirmed."""
        _, headers = register()
        _, admin_headers = admin
        created = self._order(client, headers, catalog)
        assert created.status_code == 201, created.text
        order = created.json()
        assert order["status"] == "pending"
        assert _dec(order["crypto_amount"]) == Decimal("0.9")

        order_id = order["order_id"]
        paid = client.post(
            f"{API}/orders/{order_id}/payment",
            json={"transaction_hash": TX_HASH},
            headers=headers,
        )
        assert paid.status_code == 200, paid.text
        assert paid.json()["status"] == "paid"

        denied = client.post(f"{API}/orders/{order_id}/confirm", headers=headers)
        assert denied.status_code == 403
        confirmed = client.post(f"{API}/orders/{order_id}/confirm", headers=admin_headers)
        assert confirmed.json()["status"] == "confirmed"

    def test_incomplete_billing_rejected(self, client, register, catalog) -> None:
        """Missing billing fields return 400."""
        _, headers = register()
        resp = client.post(
            f"{API}/orders",
            json={"car_id": catalog, "payment_method": "BTC", "billing": {"name": "Alice"}},
            headers=headers,
        )
        assert resp.status_code == 400

    def test_other_users_cannot_see_order(self, client, register, catalog) -> None:
        """Orders are hidden from other users."""
        _, headers = register()
        order_id = self._order(client, headers, catalog).json()["order_id"]
        _, bob_headers = register(email="bob@example.com", full_name="Bob")
        resp = client.get(f"{API}/orders/{order_id}", headers=bob_headers)
        assert resp.status_code == 403

    def test_public_tracking_by_billing_email(self, client, register, catalog) -> None:
        """Anyone with the order id and billing email can see its status."""
        _, headers = register()
        order_id = self._order(client, headers, catalog).json()["order_id"]

        found = client.post(
            f"{API}/orders/track",
            json={"order_id": order_id, "email": "ALICE@example.com"},
        )
        assert found.status_code == 200, found.text
        body = found.json()
        assert body["status"] == "pending"
        assert body["billing_name"] == "Alice Doe"
        assert "wallet_address" not in body

        wrong = client.post(
            f"{API}/orders/track",
            json={"order_id": order_id, "email": "bob@example.com"},
        )
        assert wrong.status_code == 404

    def test_car_creation_requires_admin(self, client, register) -> None:
        """Non-admins cannot add cars."""
        _, headers = register()
        resp = client.post(
            f"{API}/cars",
            json={"name": "X", "full_name": "X", "year": "2024", "price": "1"},
            headers=headers,
        )
        assert resp.status_code == 403
