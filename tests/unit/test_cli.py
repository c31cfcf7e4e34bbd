from __future__ import annotations

import json

import pytest

from src.__main__ import create_parser, main
from src.utils.logging import reset_logging


@pytest.fixture(autouse=True)
def clean_logging():
    yield
    reset_logging()


@pytest.fixture
def db_args(tmp_path) -> list[str]:
    return ["--db", str(tmp_path / "board.db")]


def _add(db_args: list[str], company: str, *extra: str) -> None:
    assert main([*db_args, "add", "--company", company, *extra]) == 0


def _board(db_args: list[str], capsys) -> dict:
    capsys.readouterr()
    assert main([*db_args, "board", "--json"]) == 0
    return json.loads(capsys.readouterr().out)


def _ids(board: dict, column: str) -> list[int]:
    return [job["id"] for job in board[column]]


def test_cli_parser_supports_board_subcommands() -> None:
    parser = create_parser()

    assert parser.parse_args(["board"]).command == "board"
    assert parser.parse_args(["board", "--json"]).json is True

    add_args = parser.parse_args(["add", "--company", "ExampleCo", "--status", "offer"])
    assert add_args.status == "OFFER"

    move_args = parser.parse_args(["move", "3", "--column", "applied"])
    assert move_args.job_id == 3
    assert move_args.column == "APPLIED"
    assert move_args.card is None

    move_args = parser.parse_args(["move", "3", "--card", "7", "--after"])
    assert move_args.card == 7
    assert move_args.side == "after"

    assert parser.parse_args(["delete", "4"]).job_id == 4
    assert parser.parse_args(["stats"]).command == "stats"


def test_cli_move_requires_exactly_one_target() -> None:
    parser = create_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["move", "3"])
    with pytest.raises(SystemExit):
        parser.parse_args(["move", "3", "--column", "APPLIED", "--card", "4"])


def test_cli_rejects_unknown_column() -> None:
    with pytest.raises(SystemExit):
        create_parser().parse_args(["move", "3", "--column", "ARCHIVED"])


def test_cli_without_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_cli_add_puts_new_jobs_on_top(db_args, capsys) -> None:
    _add(db_args, "First")
    _add(db_args, "Second", "--title", "Engineer")

    board = _board(db_args, capsys)

    assert [job["company"] for job in board["WISHLIST"]] == ["Second", "First"]
    assert board["WISHLIST"][0]["title"] == "Engineer"
    assert board["APPLIED"] == []


def test_cli_move_to_column_appends(db_args, capsys) -> None:
    _add(db_args, "A")
    _add(db_args, "B", "--status", "APPLIED")
    capsys.readouterr()

    assert main([*db_args, "move", "1", "--column", "APPLIED"]) == 0
    assert "Moved job 1 to APPLIED" in capsys.readouterr().out

    board = _board(db_args, capsys)
    assert board["WISHLIST"] == []
    assert _ids(board, "APPLIED") == [2, 1]


def test_cli_move_onto_card_within_column(db_args, capsys) -> None:
    for company in ("C", "B", "A"):
        _add(db_args, company)
    # WISHLIST now shows 3, 2, 1

    assert main([*db_args, "move", "1", "--card", "3"]) == 0

    board = _board(db_args, capsys)
    assert _ids(board, "WISHLIST") == [1, 3, 2]


def test_cli_move_with_explicit_side(db_args, capsys) -> None:
    for company in ("C", "B", "A"):
        _add(db_args, company)

    assert main([*db_args, "move", "3", "--card", "2", "--after"]) == 0

    board = _board(db_args, capsys)
    assert _ids(board, "WISHLIST") == [2, 3, 1]


def test_cli_move_to_same_slot_is_a_noop(db_args, capsys) -> None:
    _add(db_args, "A")
    capsys.readouterr()

    assert main([*db_args, "move", "1", "--column", "WISHLIST"]) == 0

    assert "Nothing to do" in capsys.readouterr().out


def test_cli_move_unknown_job_fails(db_args, capsys) -> None:
    assert main([*db_args, "move", "42", "--column", "APPLIED"]) == 1
    assert "42" in capsys.readouterr().err


def test_cli_delete_and_stats(db_args, capsys) -> None:
    _add(db_args, "A")
    _add(db_args, "B", "--status", "OFFER")
    capsys.readouterr()

    assert main([*db_args, "delete", "1"]) == 0
    assert capsys.readouterr().out.strip() == "ok"
    assert main([*db_args, "delete", "1"]) == 1

    capsys.readouterr()
    assert main([*db_args, "stats"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert "WISHLIST: 0" in lines
    assert "OFFER: 1" in lines
    assert len(lines) == 6


def test_cli_add_rejects_blank_company(db_args, capsys) -> None:
    assert main([*db_args, "add", "--company", "  "]) == 1
    assert "Error" in capsys.readouterr().err


def test_cli_parser_supports_edit() -> None:
    edit_args = create_parser().parse_args(
        ["edit", "3", "--status", "interview", "--notes", "", "--date-applied", "2025-02-20"]
    )

    assert edit_args.job_id == 3
    assert edit_args.status == "INTERVIEW"
    assert edit_args.notes == ""
    assert edit_args.title is None


def test_cli_move_side_requires_card(db_args) -> None:
    with pytest.raises(SystemExit):
        main([*db_args, "move", "3", "--column", "APPLIED", "--before"])
    with pytest.raises(SystemExit):
        main([*db_args, "move", "3", "--column", "APPLIED", "--after"])


def test_cli_edit_updates_fields(db_args, capsys) -> None:
    _add(db_args, "A", "--title", "Engineer", "--notes", "old")
    capsys.readouterr()

    assert main([*db_args, "edit", "1", "--notes", "Recruiter call", "--title", ""]) == 0
    assert "Updated job 1 in WISHLIST" in capsys.readouterr().out

    job = _board(db_args, capsys)["WISHLIST"][0]
    assert job["notes"] == "Recruiter call"
    assert job["title"] is None
    assert job["company"] == "A"


def test_cli_edit_status_moves_job_to_top(db_args, capsys) -> None:
    _add(db_args, "A", "--status", "APPLIED")
    _add(db_args, "B")

    assert main([*db_args, "edit", "2", "--status", "APPLIED"]) == 0

    board = _board(db_args, capsys)
    assert board["WISHLIST"] == []
    assert _ids(board, "APPLIED") == [2, 1]


def test_cli_edit_without_fields_fails(db_args, capsys) -> None:
    _add(db_args, "A")
    capsys.readouterr()

    assert main([*db_args, "edit", "1"]) == 1
    assert "Nothing to update" in capsys.readouterr().err


def test_cli_edit_unknown_job_fails(db_args, capsys) -> None:
    assert main([*db_args, "edit", "42", "--notes", "x"]) == 1
    assert "Not found" in capsys.readouterr().out


def test_cli_edit_rejects_blank_company(db_args, capsys) -> None:
    _add(db_args, "A")
    capsys.readouterr()

    assert main([*db_args, "edit", "1", "--company", " "]) == 1
    assert "Error" in capsys.readouterr().err
