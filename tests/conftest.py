"""Shared fixtures for discount engine tests."""

import pytest

from discount_engine.domain.models import Transaction
from helpers import SAMPLE_CSV, SCENARIO_TRANSACTION, FakeOrderRepository


@pytest.fixture
def scenario_tx() -> Transaction:
    return SCENARIO_TRANSACTION


@pytest.fixture
def fake_repository() -> FakeOrderRepository:
    return FakeOrderRepository()


@pytest.fixture
def sample_csv_path(tmp_path):
    path = tmp_path / "transactions.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path
