import logging

import pytest
from fastapi.testclient import TestClient

from helpers import SAMPLE_CSV, FakeOrderRepository
from discount_engine import __version__
from discount_engine.api.dependencies import get_order_repository, get_trace_logger
from discount_engine.api.schemas import ErrorResponse
from discount_engine.config import Settings
from discount_engine.main import app, create_app

client = TestClient(app)

SCENARIO_BODY = {
    "occurred_on": "2025-03-23",
    "product_name": "Cheddar Cheese",
    "expiry_date": "2025-04-01",
    "quantity": 8,
    "unit_price": 50.0,
    "via_app": True,
    "payment_method": "visa",
}


@pytest.fixture
def repository():
    fake = FakeOrderRepository()
    app.dependency_overrides[get_order_repository] = lambda: fake
    app.dependency_overrides[get_trace_logger] = lambda: logging.getLogger("tests.trace")
    yield fake
    app.dependency_overrides.clear()


def upload(content: str | bytes, filename: str = "transactions.csv", **params):
    if isinstance(content, str):
        content = content.encode("utf-8")
    files = {"file": (filename, content, "text/csv")}
    return client.post("/api/v1/discounts/batch", files=files, params=params)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy", "version": __version__, "database": "unavailable"}


def test_evaluate_scenario():
    r = client.post("/api/v1/discounts/evaluate", json=SCENARIO_BODY)
    assert r.status_code == 200

    data = r.json()
    assert data["product_name"] == "Cheddar Cheese"
    assert data["discount_percent"] == 35.5
    assert data["final_price"] == pytest.approx(258.0)
    assert data["rules"]["special_date"] == 50.0
    assert data["rules"]["expiry"] == 21.0


def test_evaluate_rejects_negative_quantity():
    r = client.post("/api/v1/discounts/evaluate", json={**SCENARIO_BODY, "quantity": -1})
    assert r.status_code == 422


def test_evaluate_rejects_missing_field():
    body = {k: v for k, v in SCENARIO_BODY.items() if k != "expiry_date"}
    r = client.post("/api/v1/discounts/evaluate", json=body)
    assert r.status_code == 422


def test_batch_processes_and_persists(repository):
    r = upload(SAMPLE_CSV)
    assert r.status_code == 200

    data = r.json()
    assert data["processed"] == 3
    assert data["skipped"] == []
    assert [o["discount"] for o in data["orders"]] == [35.5, 6.0, 0.0]
    assert [o.product_name for o in repository.records] == [
        "Cheddar Cheese",
        "Wine - White - Concha Y Toro",
        "Apple Juice",
    ]
    assert repository.commits == 1


def test_batch_rejects_non_csv(repository):
    r = upload(SAMPLE_CSV, filename="transactions.txt")
    assert r.status_code == 422
    assert repository.records == []


def test_batch_rejects_empty_file(repository):
    r = upload(b"")
    assert r.status_code == 400


def test_batch_malformed_row_aborts(repository):
    r = upload(SAMPLE_CSV + "2025-01-01,Broken,2025-02-01,many,1.0,false,cash\n")
    assert r.status_code == 422
    assert "line 5" in r.json()["detail"]
    assert repository.records == []


def test_batch_skip_policy(repository):
    r = upload(
        SAMPLE_CSV + "2025-01-01,Broken,2025-02-01,many,1.0,false,cash\n",
        on_invalid_row="skip",
    )
    assert r.status_code == 200

    data = r.json()
    assert data["processed"] == 3
    assert data["skipped"][0]["row_number"] == 5
    assert len(repository.records) == 3


def test_batch_without_database_is_unavailable():
    app.dependency_overrides[get_trace_logger] = lambda: logging.getLogger("tests.trace")
    try:
        r = upload(SAMPLE_CSV)
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 503


def test_debug_routes_hidden_by_default():
    r = client.post("/api/v1/debug/rules", json=SCENARIO_BODY)
    assert r.status_code == 404


def test_debug_rule_breakdown():
    debug_client = TestClient(create_app(Settings(debug=True)))

    r = debug_client.post("/api/v1/debug/rules", json=SCENARIO_BODY)
    assert r.status_code == 200

    data = r.json()
    assert data["applicable"] == [50.0, 21.0, 10.0, 10.0, 5.0, 5.0]
    assert data["discount_percent"] == 35.5


class FailingOrderRepository(FakeOrderRepository):
    async def commit(self) -> None:
        raise RuntimeError("connection lost")


@pytest.mark.parametrize("debug, detail", [(False, "An internal error occurred"), (True, "connection lost")])
def test_unhandled_error_uses_error_schema(debug, detail):
    failing_app = create_app(Settings(debug=debug))
    failing_app.dependency_overrides[get_order_repository] = FailingOrderRepository
    failing_app.dependency_overrides[get_trace_logger] = lambda: logging.getLogger("tests.trace")
    failing_client = TestClient(failing_app, raise_server_exceptions=False)

    files = {"file": ("transactions.csv", SAMPLE_CSV.encode("utf-8"), "text/csv")}
    r = failing_client.post("/api/v1/discounts/batch", files=files)

    assert r.status_code == 500
    assert r.json() == ErrorResponse(error="Internal Server Error", detail=detail).model_dump()
