import asyncio
import logging

import pytest

from helpers import FakeOrderRepository, make_transaction
from discount_engine.logging_config import TRACE_LOGGER_NAME, trace_log
from discount_engine.services.processing import evaluate_transactions, process_transactions

def test_evaluate_transactions_keeps_input_order(scenario_tx):
    plain = make_transaction(product_name="Bread", quantity=2, unit_price=1.5)

    records = evaluate_transactions([scenario_tx, plain])

    assert [r.product_name for r in records] == ["Cheddar Cheese", "Bread"]
    assert records[0].discount == 35.5
    assert records[0].order_date == scenario_tx.occurred_on
    assert records[1].discount == 0.0
    assert records[1].final_price == 3.0

def test_process_transactions_persists_and_commits_once(scenario_tx):
    repository = FakeOrderRepository()
    txs = [scenario_tx, make_transaction(product_name="Red Wine", quantity=10)]

    records = asyncio.run(process_transactions(txs, repository))

    assert repository.records == records
    assert repository.commits == 1
    assert records[1].discount == 6.0

def test_process_transactions_writes_trace_lines(tmp_path, scenario_tx):
    log_path = tmp_path / "logs" / "rules_engine.log"
    repository = FakeOrderRepository()

    with trace_log(log_path) as trace:
        asyncio.run(process_transactions([scenario_tx, make_transaction()], repository, trace))

    lines = log_path.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("INFO   Applied discount 35.5% to Cheddar Cheese")
    assert lines[1].endswith("INFO   Applied discount 0.0% to Apple Juice")

def test_trace_log_appends_across_runs(tmp_path):
    log_path = tmp_path / "rules_engine.log"

    with trace_log(log_path) as trace:
        trace.info("first")
    with trace_log(log_path) as trace:
        trace.info("second")

    lines = log_path.read_text().splitlines()
    assert [line.split("   ")[-1] for line in lines] == ["first", "second"]

def test_trace_log_releases_handler_on_error(tmp_path):
    with pytest.raises(RuntimeError):
        with trace_log(tmp_path / "trace.log") as trace:
            raise RuntimeError("boom")

    assert trace.handlers == []

def test_overlapping_trace_logs_write_one_line_per_transaction(tmp_path):
    log_path = tmp_path / "rules_engine.log"
    first = make_transaction(product_name="Apple Juice")
    second = make_transaction(product_name="Red Wine")

    with trace_log(log_path) as outer:
        with trace_log(log_path) as inner:
            evaluate_transactions([first], inner)
        evaluate_transactions([second], outer)

    lines = log_path.read_text().splitlines()
    assert [line.split("   ")[-1] for line in lines] == [
        "Applied discount 0.0% to Apple Juice",
        "Applied discount 5.0% to Red Wine",
    ]

def test_trace_log_stays_out_of_the_shared_logger(tmp_path):
    with trace_log(tmp_path / "trace.log") as trace:
        assert trace is not logging.getLogger(TRACE_LOGGER_NAME)
        assert logging.getLogger(TRACE_LOGGER_NAME).handlers == []

def test_console_summary_is_logged(caplog, scenario_tx):
    with caplog.at_level(logging.INFO, logger="discount_engine"):
        evaluate_transactions([scenario_tx])

    assert any(
        "Cheddar Cheese: Discount = 35.5%, Final Price = " in message
        for message in caplog.messages
    )

def test_empty_batch():
    repository = FakeOrderRepository()

    assert asyncio.run(process_transactions([], repository)) == []
    assert repository.commits == 1
