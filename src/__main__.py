"""Main entry point for the job board."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from src import __version__
from src.config.settings import Settings
from src.utils.logging import configure_logging


def _job_id(value: str) -> int:
    try:
        job_id = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid job id: {value!r}") from None
    if job_id < 1:
        raise argparse.ArgumentTypeError("job id must be positive")
    return job_id


def _column(value: str) -> str:
    from src.tracker.models import JobStatus

    column = value.strip().upper()
    if not JobStatus.is_status(column):
        choices = ", ".join(status.value for status in JobStatus)
        raise argparse.ArgumentTypeError(f"invalid column {value!r} (choose from {choices})")
    return column


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="job-board",
        description="Job board: track job applications in ordered status columns",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src add --company ExampleCo --title "Backend Engineer"
  python -m src move 3 --column APPLIED
  python -m src move 3 --card 7 --after
  python -m src edit 3 --notes "Recruiter call on Monday"
  python -m src board
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override board DB path (defaults to settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Board operations",
    )

    board_parser = subparsers.add_parser("board", help="Show every column in order")
    board_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the board as JSON",
    )

    add_parser = subparsers.add_parser("add", help="Add a job to the top of a column")
    add_parser.add_argument("--company", type=str, required=True, help="Company name")
    add_parser.add_argument("--title", type=str, default=None, help="Role title")
    add_parser.add_argument("--location", type=str, default=None, help="Job location")
    add_parser.add_argument(
        "--status",
        type=_column,
        default=None,
        help="Column to add the job to (defaults to settings)",
    )
    add_parser.add_argument("--url", type=str, default=None, help="Job posting URL")
    add_parser.add_argument("--notes", type=str, default=None, help="Personal notes")

    move_parser = subparsers.add_parser(
        "move",
        help="Drag a job onto a column or next to another job",
    )
    move_parser.add_argument("job_id", type=_job_id, help="Job to move")
    target_group = move_parser.add_mutually_exclusive_group(required=True)
    target_group.add_argument(
        "--column",
        type=_column,
        default=None,
        help="Drop on a column (lands at its end)",
    )
    target_group.add_argument(
        "--card",
        type=_job_id,
        default=None,
        help="Drop on another job's card",
    )
    side_group = move_parser.add_mutually_exclusive_group()
    side_group.add_argument(
        "--before",
        action="store_const",
        const="before",
        dest="side",
        help="Land above the card given with --card",
    )
    side_group.add_argument(
        "--after",
        action="store_const",
        const="after",
        dest="side",
        help="Land below the card given with --card",
    )

    edit_parser = subparsers.add_parser(
        "edit",
        help="Change a job's details (an empty value clears a field)",
    )
    edit_parser.add_argument("job_id", type=_job_id, help="Job to edit")
    edit_parser.add_argument("--company", type=str, default=None, help="Company name")
    edit_parser.add_argument("--title", type=str, default=None, help="Role title")
    edit_parser.add_argument("--location", type=str, default=None, help="Job location")
    edit_parser.add_argument(
        "--status",
        type=_column,
        default=None,
        help="Column to move the job to (lands at the top)",
    )
    edit_parser.add_argument("--url", type=str, default=None, help="Job posting URL")
    edit_parser.add_argument("--notes", type=str, default=None, help="Personal notes")
    edit_parser.add_argument(
        "--contact", type=str, default=None, help="Recruiter or referral contact"
    )
    edit_parser.add_argument(
        "--date-applied",
        type=str,
        default=None,
        help="Date the application was sent (YYYY-MM-DD)",
    )

    delete_parser = subparsers.add_parser("delete", help="Delete a job")
    delete_parser.add_argument("job_id", type=_job_id, help="Job to delete")

    subparsers.add_parser("stats", help="Show job counts per column")

    return parser


def _print_board(records: list, as_json: bool) -> None:
    from src.ordering.sorter import group_by_column

    columns = group_by_column(records)
    if as_json:
        payload = {
            status.value: [record.to_dict() for record in column]
            for status, column in columns.items()
        }
        print(json.dumps(payload, indent=2))
        return

    for status, column in columns.items():
        print(f"{status.value} ({len(column)})")
        for record in column:
            title = f" - {record.title}" if record.title else ""
            print(f"  [{record.id}] {record.company}{title}  ({record.order_key})")


def _print_notice(notice) -> None:
    print(f"! {notice.message}", file=sys.stderr)


async def _run_move(service, parsed: argparse.Namespace, settings: Settings) -> int:
    from src.board.session import DragSessionController, DragState
    from src.ordering.targets import CardTarget, ColumnTarget, Direction
    from src.tracker.models import JobStatus

    records = await service.list_jobs()
    controller = DragSessionController(
        records,
        persistence=service,
        snapshots=service,
        notifier=_print_notice,
        notice_duration_seconds=settings.notice_duration_seconds,
    )

    if parsed.column is not None:
        target = ColumnTarget(JobStatus(parsed.column))
    else:
        direction = Direction(parsed.side) if parsed.side else None
        target = CardTarget(parsed.card, direction)

    try:
        controller.start(parsed.job_id)
    except LookupError as e:
        print(str(e), file=sys.stderr)
        return 1

    released_on = controller.over(target)
    outcome = controller.end(released_on)

    if outcome.pending is None:
        print("Nothing to do: the job is already there")
        return 0

    if not await controller.persist(outcome.pending):
        return 1

    moved = controller.get_record(parsed.job_id)
    if outcome.state is DragState.COMMITTED and moved is not None:
        print(f"Moved job {moved.id} to {moved.status.value} ({moved.order_key})")
    return 0


async def _run_edit(service, parsed: argparse.Namespace) -> int:
    from src.tracker.models import JobUpdate

    options = {
        "company": parsed.company,
        "title": parsed.title,
        "location": parsed.location,
        "status": parsed.status,
        "job_posting_url": parsed.url,
        "notes": parsed.notes,
        "contact_person": parsed.contact,
        "date_applied": parsed.date_applied,
    }
    fields = {name: value for name, value in options.items() if value is not None}
    if not fields:
        print("Nothing to update: give at least one field", file=sys.stderr)
        return 1

    record = await service.update_job(parsed.job_id, JobUpdate(**fields))
    if record is None:
        print("Not found")
        return 1
    print(f"Updated job {record.id} in {record.status.value} ({record.order_key})")
    return 0


async def _run_command(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.tracker.models import JobCreate, JobStatus
    from src.tracker.repository import JobRepository
    from src.tracker.service import BoardService, PersistenceError

    db_path = parsed.db or settings.board_db_path
    repo = JobRepository(db_path)
    await repo.initialize()
    service = BoardService(repo)

    try:
        if parsed.command == "board":
            _print_board(await service.list_jobs(), parsed.json)
            return 0

        if parsed.command == "add":
            data = JobCreate(
                company=parsed.company,
                title=parsed.title,
                location=parsed.location,
                status=parsed.status or settings.default_status,
                job_posting_url=parsed.url,
                notes=parsed.notes,
            )
            record = await service.create_job(data)
            print(f"Added job {record.id} to {record.status.value} ({record.order_key})")
            return 0

        if parsed.command == "move":
            return await _run_move(service, parsed, settings)

        if parsed.command == "edit":
            return await _run_edit(service, parsed)

        if parsed.command == "delete":
            if not await service.delete_job(parsed.job_id):
                print("Not found")
                return 1
            print("ok")
            return 0

        if parsed.command == "stats":
            counts = await service.get_status_counts()
            for status in JobStatus:
                print(f"{status.value}: {counts[status]}")
            return 0

        print("Unknown command", file=sys.stderr)
        return 1
    except PersistenceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await repo.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.command == "move" and parsed.column is not None and parsed.side:
        parser.error(f"--{parsed.side} only applies to --card")

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    # If no command specified, show help
    if parsed.command is None:
        parser.print_help()
        return 0

    logger.debug(f"Job board v{__version__} running {parsed.command}")

    try:
        return asyncio.run(_run_command(parsed, settings))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
