from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from oraclevault.cli import build_parser, main
from oraclevault.core.database import Database
from oraclevault.core.events import EventType


def _scaffold_repo(tmp_path: Path) -> Path:
    """Create a minimal repo root layout expected by the CLI."""

    repo_root = tmp_path
    src_root = Path(__file__).resolve().parents[2]

    (repo_root / "config").mkdir(parents=True, exist_ok=True)
    shutil.copy2(src_root / "config" / "default.yaml", repo_root / "config" / "default.yaml")
    (repo_root / "data").mkdir(parents=True, exist_ok=True)
    return repo_root


def test_cli_help_includes_subcommands(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main([])
    assert rc == 2
    out = capsys.readouterr().out
    for cmd in ("tick", "journal", "status", "api"):
        assert cmd in out


def test_cli_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["--version"])
    assert rc == 0
    assert capsys.readouterr().out.strip().startswith("oraclevault v")


def test_cli_unknown_command_errors() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["nope"])
    with pytest.raises(SystemExit):
        main(["nope"])


def test_tick_conversions(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(_scaffold_repo(tmp_path))

    assert main(["tick", "price", "0"]) == 0
    assert capsys.readouterr().out.strip() == "1"

    assert main(["tick", "tick", "1.0001"]) == 0
    assert capsys.readouterr().out.strip() == "1"

    assert main(["tick", "tick", "2000", "--base-decimals", "18", "--quote-decimals", "6"]) == 0
    assert int(capsys.readouterr().out.strip()) < 0

    assert main(["tick", "price", "999999999"]) == 2
    assert main(["tick", "tick", "not-a-price"]) == 2


def test_status(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(_scaffold_repo(tmp_path))
    assert main(["status"]) == 0
    out = capsys.readouterr().out
    assert "oraclevault status" in out
    assert "timelock 1440m" in out
    assert "(missing)" in out


def test_journal_lists_and_verifies(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    repo = _scaffold_repo(tmp_path)
    monkeypatch.chdir(repo)

    assert main(["journal"]) == 2

    db = Database(repo / "data" / "journal.db")
    db.append_event(event_type=EventType.MINT_V1, payload={"shares": 5})
    db.append_event(event_type=EventType.BURN_V1, payload={"shares": 2})
    db.close()

    assert main(["journal", "--limit", "1"]) == 0
    out = capsys.readouterr().out
    assert str(EventType.BURN_V1) in out
    assert str(EventType.MINT_V1) not in out

    assert main(["journal", "--verify"]) == 0
    assert "hash chain: ok (2 events)" in capsys.readouterr().out


def test_invalid_config_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = _scaffold_repo(tmp_path)
    (repo / "config" / "default.yaml").write_text("vault:\n  minimum_liquidity: -1\n")
    monkeypatch.chdir(repo)
    assert main(["status"]) == 2
