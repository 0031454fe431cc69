"""LinkPay Command Line Interface.

Provides operational tools for:
- Scanning for the next due payment
- Running the scheduler (scan + dispatch)
- Payment history export
- Database initialization
- Serving the HTTP API

Usage:
    python -m linkpay.cli scan
    python -m linkpay.cli run-once --max-runs 10
    python -m linkpay.cli history --company-id 3 --format json
    python -m linkpay.cli init-db
    python -m linkpay.cli serve --port 8000
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Callable

import uvicorn

from linkpay.config import get_settings
from linkpay.errors import PayrollError
from linkpay.logging_utils import setup_logging
from linkpay.orchestrator import PayrollOrchestrator, build_orchestrator


class LinkPayCli:
    """LinkPay Command Line Interface."""

    def __init__(
        self,
        orchestrator_factory: Callable[[], PayrollOrchestrator] = build_orchestrator,
    ) -> None:
        self.parser = self._build_parser()
        self._orchestrator_factory = orchestrator_factory

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="linkpay",
            description="LinkPay payroll orchestrator tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("scan", help="Show the next due payment without paying it")

        run_once = subparsers.add_parser(
            "run-once",
            help="Scan and dispatch due payments",
        )
        run_once.add_argument(
            "--max-runs",
            type=int,
            default=1,
            help="Dispatch up to this many payments (default: 1)",
        )

        history = subparsers.add_parser("history", help="Show payment history")
        history.add_argument(
            "--company-id",
            type=int,
            default=None,
            help="Only this company's payments",
        )
        history.add_argument(
            "--limit",
            type=int,
            default=50,
            help="Maximum entries (default: 50)",
        )
        history.add_argument(
            "--format",
            choices=["table", "json"],
            default="table",
            help="Output format",
        )

        subparsers.add_parser("init-db", help="Create tables and seed orchestrator state")

        serve = subparsers.add_parser("serve", help="Run the HTTP API")
        serve.add_argument("--host", default=None, help="Bind host")
        serve.add_argument("--port", type=int, default=None, help="Bind port")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[[argparse.Namespace], int]] = {
            "scan": self._cmd_scan,
            "run-once": self._cmd_run_once,
            "history": self._cmd_history,
            "init-db": self._cmd_init_db,
            "serve": self._cmd_serve,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except PayrollError as exc:
            print(f"Error [{exc.code}]: {exc.message}", file=sys.stderr)
            return 2

    def _cmd_scan(self, args: argparse.Namespace) -> int:
        token = self._orchestrator_factory().scan()
        if token is None:
            print("Nothing due")
            return 0
        print(json.dumps(token.to_dict(), indent=2))
        return 0

    def _cmd_run_once(self, args: argparse.Namespace) -> int:
        orchestrator = self._orchestrator_factory()
        dispatched = 0
        for _ in range(max(args.max_runs, 1)):
            outcome = orchestrator.run_once()
            if outcome is None:
                break
            dispatched += 1
            print(json.dumps(outcome.to_dict()))
        print(f"Dispatched: {dispatched}")
        return 0

    def _cmd_history(self, args: argparse.Namespace) -> int:
        records = self._orchestrator_factory().payment_history(
            company_id=args.company_id, limit=args.limit
        )

        if args.format == "json":
            for record in records:
                print(
                    json.dumps(
                        {
                            "event_type": record.event_type,
                            "status": record.status,
                            "company_id": record.company_id,
                            "employee_id": record.employee_id,
                            "employee_name": record.employee_name,
                            "amount": record.amount,
                            "network": record.network,
                            "tracking_handle": record.tracking_handle,
                            "occurred_at": record.occurred_at.isoformat(),
                        }
                    )
                )
            return 0

        print(f"{'When':<20} {'Status':<10} {'Employee':<20} {'Amount':>14}  Network")
        print("-" * 80)
        for record in records:
            print(
                f"{record.occurred_at:%Y-%m-%d %H:%M:%S}  {record.status:<10} "
                f"{record.employee_name[:20]:<20} {record.amount:>14}  {record.network}"
            )
        print(f"\nTotal: {len(records)}")
        return 0

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        orchestrator = self._orchestrator_factory()
        settings = orchestrator.settings()
        print("Database ready")
        print(f"  admin: {settings.admin_identity}")
        print(f"  interval_seconds: {settings.interval_seconds}")
        print(f"  allowed destinations: {settings.allowed_destinations}")
        return 0

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        settings = get_settings()
        uvicorn.run(
            "linkpay.api.app:create_app",
            factory=True,
            host=args.host or settings.HOST,
            port=args.port or settings.PORT,
            reload=settings.DEBUG,
        )
        return 0


def main() -> int:
    """CLI entry point."""
    settings = get_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)
    cli = LinkPayCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
