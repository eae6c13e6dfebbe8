from hl_actions.errors import ExchangeError

from .conftest import TEST_ADDRESS, StubResponse, order_response


def test_market_entry_is_priced_at_gateway_mark(client, exchange, gateway):
    resp = client.post("/hyperliquid/entry", json={"symbol": "BTC-USD", "side": "buy", "size": "0.01"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["environment"] == "testnet"

    [call] = exchange.kwargs_for("place_orders")
    [primary] = call["orders"]
    assert primary.price == "50000"
    assert primary.tif == "FrontendMarket"
    assert primary.size == "0.01"
    assert primary.reduce_only is False

    assert gateway.requests[0]["url"] == "https://gateway.example/v1/hyperliquid/market-stats"
    assert gateway.requests[0]["params"] == {"symbol": "BTC"}


def test_market_entry_ignores_caller_price(client, exchange):
    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "ETH-USD", "side": "sell", "size": 1, "price": 1234, "type": "market"},
    )

    assert resp.status_code == 200
    [call] = exchange.kwargs_for("place_orders")
    assert call["orders"][0].price == "50000"


def test_limit_entry_without_price_is_rejected_before_exchange(client, exchange, gateway, records):
    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "BTC-USD", "side": "buy", "size": "0.01", "type": "limit", "leverage": 5},
    )

    assert resp.status_code == 400
    assert resp.json() == {"ok": False, "error": "price is required for limit orders"}
    assert exchange.calls == []
    assert gateway.requests == []

    [record] = records()
    assert record.status == "rejected"
    assert record.action == "order"
    assert record.wallet_address == TEST_ADDRESS


def test_limit_entry_uses_caller_tif_and_price(client, exchange, gateway):
    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "BTC-USD", "side": "buy", "size": "0.01", "type": "limit", "price": "49000.5", "tif": "Gtc"},
    )

    assert resp.status_code == 200
    [primary] = exchange.kwargs_for("place_orders")[0]["orders"]
    assert primary.price == "49000.5"
    assert primary.tif == "Gtc"
    assert gateway.requests == []


def test_take_profit_and_stop_loss_go_out_as_one_reduce_only_batch(client, exchange):
    resp = client.post(
        "/hyperliquid/entry",
        json={
            "symbol": "BTC-USD",
            "side": "buy",
            "size": "0.02",
            "takeProfitPx": 55000,
            "stopLossPx": "45000",
        },
    )

    assert resp.status_code == 200
    primary_call, trigger_call = exchange.kwargs_for("place_orders")
    assert len(primary_call["orders"]) == 1

    triggers = trigger_call["orders"]
    assert len(triggers) == 2
    assert all(order.reduce_only for order in triggers)
    assert all(order.side == "sell" for order in triggers)
    assert all(order.size == "0.02" for order in triggers)
    assert [order.trigger.tpsl for order in triggers] == ["tp", "sl"]
    assert [order.trigger.trigger_px for order in triggers] == ["55000", "45000"]
    assert all(order.trigger.is_market for order in triggers)


def test_leverage_is_updated_before_the_order(client, exchange):
    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "SOL-USD", "side": "sell", "size": "3", "leverage": 10, "leverageMode": "isolated"},
    )

    assert resp.status_code == 200
    assert exchange.names() == ["update_leverage", "place_orders"]
    [leverage_call] = exchange.kwargs_for("update_leverage")
    assert leverage_call["leverage"] == 10
    assert leverage_call["leverage_mode"] == "isolated"
    assert leverage_call["symbol"] == "SOL-USD"


def test_fractional_leverage_is_a_validation_error(client, exchange):
    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "BTC-USD", "side": "buy", "size": "0.01", "leverage": 2.5},
    )

    assert resp.status_code == 400
    assert "leverage" in resp.json()["error"]["fieldErrors"]
    assert exchange.calls == []


def test_successful_entry_records_one_order_action(client, exchange, records):
    exchange.order_results = [order_response({"filled": {"oid": 77, "totalSz": "0.01", "avgPx": "50010"}})]

    resp = client.post("/hyperliquid/entry", json={"symbol": "BTC-USD", "side": "buy", "size": "0.01"})

    assert resp.status_code == 200
    assert resp.json()["orderRef"] == "77"

    [record] = records()
    assert record.action == "order"
    assert record.status == "submitted"
    assert record.ref == "77"
    assert record.wallet_address == TEST_ADDRESS
    assert record.network == "hyperliquid-testnet"
    assert record.notional == "0.01"
    assert record.details["price"] == "50000"
    assert record.details["entryResponse"]["status"] == "ok"


def test_entry_without_order_ids_gets_synthetic_ref(client, exchange, records):
    exchange.order_results = [order_response()]

    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "BTC-USD", "side": "buy", "size": "0.01", "environment": "mainnet"},
    )

    assert resp.status_code == 200
    ref = resp.json()["orderRef"]
    assert ref.startswith("BTC-USD-")
    [record] = records()
    assert record.ref == ref
    assert record.network == "hyperliquid"


def test_exchange_rejection_keeps_leverage_and_records_failure(client, exchange, records):
    raw = {"status": "err", "response": "Insufficient margin to place order."}
    exchange.order_results = [ExchangeError("Hyperliquid order rejected", response=raw)]

    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "BTC-USD", "side": "buy", "size": "0.01", "leverage": 3},
    )

    assert resp.status_code == 500
    body = resp.json()
    assert body["ok"] is False
    assert body["exchangeResponse"] == raw
    assert exchange.names() == ["update_leverage", "place_orders"]

    [record] = records()
    assert record.status == "failed"
    assert record.details["leverageResponse"]["status"] == "ok"
    assert record.details["exchangeResponse"] == raw


def test_trigger_failure_after_primary_is_recorded_as_partial(client, exchange, records):
    exchange.order_results = [
        order_response({"resting": {"oid": 5}}),
        ExchangeError("Hyperliquid order rejected: bad trigger", response={"status": "err"}),
    ]

    resp = client.post(
        "/hyperliquid/entry",
        json={"symbol": "BTC-USD", "side": "buy", "size": "0.01", "stopLossPx": "40000"},
    )

    assert resp.status_code == 500
    body = resp.json()
    assert body["entry"]["response"]["data"]["statuses"] == [{"resting": {"oid": 5}}]

    [record] = records()
    assert record.status == "partial"
    assert record.ref == "5"


def test_gateway_failure_is_reported_and_recorded(client, exchange, gateway, records):
    gateway.response = StubResponse(503, None, text="unavailable")

    resp = client.post("/hyperliquid/entry", json={"symbol": "BTC-USD", "side": "buy", "size": "0.01"})

    assert resp.status_code == 502
    assert resp.json()["ok"] is False
    assert exchange.calls == []
    [record] = records()
    assert record.status == "failed"


def test_invalid_body_returns_structured_validation_error(client, exchange):
    resp = client.post("/hyperliquid/entry", json={"symbol": "", "side": "hold", "size": "abc"})

    assert resp.status_code == 400
    error = resp.json()["error"]
    assert set(error["fieldErrors"]) >= {"symbol", "side", "size"}
    assert exchange.calls == []


def test_failed_entries_get_distinct_symbol_refs(client, exchange, records):
    for symbol in ("BTC-USD", "ETH-USD"):
        resp = client.post("/hyperliquid/entry", json={"symbol": symbol, "side": "buy", "size": "1", "type": "limit"})
        assert resp.status_code == 400

    exchange.order_results = [ExchangeError("Hyperliquid order rejected", response={"status": "err"})]
    client.post("/hyperliquid/entry", json={"symbol": "SOL-USD", "side": "sell", "size": "2"})

    refs = [record.ref for record in records("order")]
    assert [ref.rsplit("-", 1)[0] for ref in refs] == ["BTC-USD", "ETH-USD", "SOL-USD"]
    assert all(ref.rsplit("-", 1)[1].isdigit() for ref in refs)
