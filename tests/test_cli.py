import json
import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

import main
from main import DeskManager, app
from utils.ui_helpers import OUTPUT_MODE_ENV

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_desk(desk, monkeypatch):
    # Every CLI test talks to the same fresh desk; log output stays out of stdout
    monkeypatch.setattr(main, "configure_logging", lambda *a, **k: None)
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
    DeskManager.reset(desk)
    yield desk
    DeskManager.reset()


def test_list_items():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Book[id=1, title='Clean Code', author='Robert C. Martin', status=Available] (pages=464)" in result.stdout
    assert "EMagazine[id=9" in result.stdout


def test_list_items_json():
    result = runner.invoke(app, ["--output", "json", "list"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip().splitlines()[-1])
    assert [i["id"] for i in payload] == list(range(1, 10))
    assert payload[1]["hours"] == 11.5


def test_show_item_not_found():
    result = runner.invoke(app, ["show", "99"])
    assert result.exit_code == 0
    assert "Item with ID 99 not found." in result.stdout


def test_search_no_match():
    result = runner.invoke(app, ["search", "zzz"])
    assert "No items match 'zzz'." in result.stdout


def test_search_by_type():
    result = runner.invoke(app, ["search", "audiobook"])
    assert "AudioBook[id=2" in result.stdout
    assert "AudioBook[id=7" in result.stdout
    assert "Book[id=1" not in result.stdout


def test_borrow_and_return_with_fine(cli_desk, clock):
    result = runner.invoke(app, ["borrow", "1", "Alice", "--days", "5"])
    assert result.exit_code == 0
    assert "Borrowed: Book[id=1" in result.stdout
    assert cli_desk.lookup(1).value.borrower == "Alice"

    clock.advance(days=7)
    result = runner.invoke(app, ["return", "1"])
    assert "Returned item 1." in result.stdout
    assert "Fine applied: FineRecord[itemId=1, borrower='Alice', daysOverdue=2, amount=20.0" in result.stdout

    result = runner.invoke(app, ["fines"])
    assert "daysOverdue=2" in result.stdout


def test_borrow_unavailable_item():
    runner.invoke(app, ["borrow", "4", "Alice"])
    result = runner.invoke(app, ["borrow", "4", "Bob"])
    assert "Error: Item id 4 is not available for borrowing." in result.stdout


def test_borrow_rejects_bad_input(cli_desk):
    result = runner.invoke(app, ["borrow", "1", "Alice", "--days", "0"])
    assert result.exit_code == 1
    assert "days must be between" in result.stdout

    result = runner.invoke(app, ["borrow", "1", "   "])
    assert result.exit_code == 1
    assert cli_desk.lookup(1).value.available is True


def test_return_already_available():
    result = runner.invoke(app, ["return", "3"])
    assert "Item 3 is already available." in result.stdout


def test_play_and_archive_messages():
    result = runner.invoke(app, ["play", "2"])
    assert "Playing audiobook 'Effective Java - Audio'" in result.stdout

    result = runner.invoke(app, ["play", "1"])
    assert "Item 1 is not an audiobook." in result.stdout

    result = runner.invoke(app, ["archive", "3"])
    assert "Archived e-magazine 'Nature Monthly' issue #2025" in result.stdout

    result = runner.invoke(app, ["archive", "2"])
    assert "Item 2 is not an e-magazine." in result.stdout


def test_no_fines():
    result = runner.invoke(app, ["fines"])
    assert "No fines recorded." in result.stdout


def test_fines_filtered_by_borrower(clock):
    runner.invoke(app, ["borrow", "1", "Alice", "--days", "1"])
    runner.invoke(app, ["borrow", "4", "Bob", "--days", "1"])
    clock.advance(days=3)
    runner.invoke(app, ["return", "1"])
    runner.invoke(app, ["return", "4"])

    result = runner.invoke(app, ["fines", "--borrower", "Bob"])
    assert result.exit_code == 0
    assert "borrower='Bob'" in result.stdout
    assert "borrower='Alice'" not in result.stdout

    result = runner.invoke(app, ["fines", "-b", "Nobody"])
    assert "No fines recorded." in result.stdout


def test_stats():
    runner.invoke(app, ["borrow", "5", "Alice"])
    result = runner.invoke(app, ["stats"])
    assert "Total Items: 9" in result.stdout
    assert "Borrowed: 1" in result.stdout


def test_menu_borrow_then_exit(cli_desk):
    result = runner.invoke(app, ["menu"], input="2\n1\nAlice\n3\n7\n0\n")
    assert result.exit_code == 0
    assert "No fines recorded." in result.stdout
    assert "Bye!" in result.stdout
    item = cli_desk.lookup(1).value
    assert item.available is False
    assert item.borrower == "Alice"


def test_serve_command(monkeypatch):
    run_mock = MagicMock()
    monkeypatch.setattr(main.subprocess, "run", run_mock)
    result = runner.invoke(app, ["serve", "--port", "8123"])
    assert result.exit_code == 0
    assert "Starting API on http://" in result.stdout
    args = run_mock.call_args[0][0]
    assert "uvicorn" in args
    assert "api:app" in args
    assert "8123" in args
