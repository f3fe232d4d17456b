"""Utility script to run one notification sweep outside the scheduler."""

from __future__ import annotations

import argparse
import logging

import anyio
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.infrastructure.database import initialize_database
from app.services import build_services

SWEEPS = ("retry", "cleanup")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the sweep run."""

    parser = argparse.ArgumentParser(
        description="Run a single notification maintenance sweep.",
    )
    parser.add_argument(
        "sweep",
        choices=SWEEPS,
        help="retry: resend unsent emails; cleanup: delete old read notifications",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to the LOG_LEVEL setting)",
    )
    return parser.parse_args()


async def run_sweep(sweep: str) -> str:
    settings = get_settings()
    services = build_services(settings)
    initialize_database(services.engine)
    try:
        if sweep == "retry":
            result = await services.scheduler.run_retry_sweep()
            if result is None:
                raise SystemExit("The email retry sweep failed; see the log for details.")
            return (
                f"Emails attempted: {result.attempted}\n"
                f"  Sent: {result.sent}\n"
                f"  Failed: {result.failed}"
            )
        deleted = await services.scheduler.run_cleanup_sweep()
        if deleted is None:
            raise SystemExit("The cleanup sweep failed; see the log for details.")
        return f"Notifications deleted: {deleted}"
    finally:
        await services.stop()


def main() -> None:
    """Run the sweep named on the command line."""

    args = parse_args()
    logging.basicConfig(level=(args.log_level or get_settings().log_level).upper())

    try:
        summary = anyio.run(run_sweep, args.sweep)
    except SQLAlchemyError as exc:
        raise SystemExit(f"Database error while running the sweep: {exc}") from exc
    print(summary)


if __name__ == "__main__":
    main()
