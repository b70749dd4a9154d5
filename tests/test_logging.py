from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

import reconcile
from remit_reconcile.events import LoggingSink
from remit_reconcile.logging_config import setup_logging


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _json_lines(out: str) -> list[dict]:
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


def test_json_logging_carries_event_fields(restore_root_logger: None, capsys) -> None:
    setup_logging(level=logging.INFO, format_as_json=True)
    LoggingSink().emit("header-row", index=2, labels=["ID"])

    lines = _json_lines(capsys.readouterr().out)
    assert len(lines) == 1
    line = lines[0]
    assert line["level"] == "INFO"
    assert line["name"] == "remit_reconcile"
    assert line["event"] == "header-row"
    assert line["event_fields"] == {"index": 2, "labels": ["ID"]}
    assert line["message"] == "header-row: index=2, labels=['ID']"


def test_plain_logging_is_not_json(restore_root_logger: None, capsys) -> None:
    setup_logging(level=logging.INFO, format_as_json=False)
    LoggingSink().emit("partition", matched=1)
    out = capsys.readouterr().out
    assert "partition: matched=1" in out
    assert _json_lines(out) == []


def test_cli_log_json_reports_pipeline_events(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, restore_root_logger: None, capsys
) -> None:
    source = tmp_path / "remittance.csv"
    source.write_text("ID,Amt\nX,50\n", encoding="utf-8")
    target = tmp_path / "submission.csv"
    target.write_text("Claim ID,Amt\nX,80\nY,10\n", encoding="utf-8")
    monkeypatch.setattr(
        sys,
        "argv",
        ["reconcile.py", "--source", str(source), "--target", str(target), "--dry-run", "--log-json", "--verbose"],
    )

    assert reconcile.main() == 0

    events = {line["event"]: line["event_fields"] for line in _json_lines(capsys.readouterr().out)}
    assert events["partition"] == {"matched": 1, "unmatched": 1, "total": 2}
    assert events["source-identifiers"] == {"unique": 1}
