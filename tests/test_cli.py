"""Tests for the command line interface."""

import json

import pytest

from linkpay.cli import LinkPayCli
from linkpay.errors import NotOwner
from tests.conftest import ARBITRUM, BASE, INTERVAL, OWNER_A, SALARY


@pytest.fixture
def cli(orchestrator):
    return LinkPayCli(orchestrator_factory=lambda: orchestrator)


def test_no_command_prints_help(cli, capsys):
    assert cli.run([]) == 1
    assert "usage: linkpay" in capsys.readouterr().out


def test_scan_nothing_due(cli, capsys):
    assert cli.run(["scan"]) == 0
    assert capsys.readouterr().out.strip() == "Nothing due"


def test_scan_prints_token(cli, make_company, clock, capsys):
    _, [employee] = make_company()
    clock.advance(INTERVAL)

    assert cli.run(["scan"]) == 0

    token = json.loads(capsys.readouterr().out)
    assert token["employee_id"] == employee.employee_id
    assert token["next_company_index"] == 1


def test_run_once_dispatches_up_to_max(cli, make_company, clock, fund, capsys):
    make_company(destinations=[BASE, BASE, BASE])
    fund(OWNER_A, 10 * SALARY)
    clock.advance(INTERVAL)

    assert cli.run(["run-once", "--max-runs", "2"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert [json.loads(line)["state"] for line in lines[:-1]] == ["local_settled"] * 2
    assert lines[-1] == "Dispatched: 2"

    assert cli.run(["run-once", "--max-runs", "5"]) == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "Dispatched: 1"


def test_history_json(cli, make_company, clock, fund, capsys):
    company, _ = make_company(destinations=[ARBITRUM])
    fund(OWNER_A, 2 * SALARY)
    clock.advance(INTERVAL)
    cli.run(["run-once"])
    capsys.readouterr()

    assert cli.run(["history", "--company-id", str(company.company_id), "--format", "json"]) == 0

    [line] = capsys.readouterr().out.strip().splitlines()
    record = json.loads(line)
    assert record["status"] == "completed"
    assert record["network"] == "Arbitrum Sepolia"
    assert record["tracking_handle"].startswith("0x")


def test_history_table(cli, make_company, capsys):
    make_company()

    assert cli.run(["history"]) == 0
    assert "Total: 0" in capsys.readouterr().out


def test_init_db_reports_state(cli, capsys):
    assert cli.run(["init-db"]) == 0
    out = capsys.readouterr().out
    assert "Database ready" in out
    assert f"interval_seconds: {INTERVAL}" in out


def test_domain_error_exit_code(capsys):
    def failing_factory():
        raise NotOwner()

    assert LinkPayCli(orchestrator_factory=failing_factory).run(["scan"]) == 2
    assert "NOT_OWNER" in capsys.readouterr().err
