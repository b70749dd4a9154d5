from __future__ import annotations

from datetime import datetime

import pytest

from remit_reconcile.events import ListSink
from remit_reconcile.header import consistency_score, locate_header_row, score_rows, value_category
from remit_reconcile.models import Cell, Grid


REMITTANCE_WITH_BANNER = [
    ["Remittance Report", "", "", ""],
    ["", "", "", ""],
    ["ID", "Patient Name", "Service Date", "Amount"],
    ["A1", "John", "01/02/2024", 100],
    ["A2", "Mary", "02/02/2024", 50.5],
    ["A3", "Anne", "03/02/2024", 20],
]


def test_locate_header_row_skips_banner_and_blank_rows() -> None:
    grid = Grid.from_values(REMITTANCE_WITH_BANNER)
    assert locate_header_row(grid) == 2


def test_locate_header_row_reports_choice_to_sink() -> None:
    sink = ListSink()
    locate_header_row(Grid.from_values(REMITTANCE_WITH_BANNER), sink=sink)
    events = sink.named("header-row")
    assert len(events) == 1
    assert events[0]["index"] == 2
    assert events[0]["reason"] == "best-score"


def test_clean_header_scores_every_feature_at_maximum() -> None:
    scores = score_rows(Grid.from_values(REMITTANCE_WITH_BANNER))
    header = scores[2]
    assert header.index == 2
    assert header.fill_rate == 1.0
    assert header.text_ratio == 1.0
    assert header.term_score == 1.0
    assert header.uniqueness_ratio == 1.0
    assert header.consistency_score == 1.0
    assert header.score == pytest.approx(1.0)


@pytest.mark.parametrize("rows", [[], [[], []]])
def test_locate_header_row_defaults_to_zero_without_rows(rows: list) -> None:
    assert locate_header_row(Grid.from_values(rows)) == 0


def test_locate_header_row_defaults_to_zero_for_low_scores() -> None:
    sink = ListSink()
    grid = Grid.from_values([[""], [""], ["", "Report"]])
    assert locate_header_row(grid, sink=sink) == 0
    assert sink.named("header-row")[0]["reason"] == "low-score"


def test_noise_words_cap_row_at_penalised_score() -> None:
    grid = Grid.from_values(
        [
            ["Claim ID", "Total Amount", "Status"],
            ["C1", 10, "paid"],
            ["C2", 20, "denied"],
        ]
    )
    noisy = score_rows(grid)[0]
    assert noisy.has_noise
    assert noisy.score == pytest.approx(noisy.base_score * 0.3)


def test_single_value_and_noise_penalties_stack() -> None:
    grid = Grid.from_values([["Summary", ""], ["a", "b"]])
    row = score_rows(grid)[0]
    assert row.has_noise and row.single_value
    assert row.score == pytest.approx(row.base_score * 0.3 * 0.2)


def test_ties_resolve_to_lowest_row_index() -> None:
    grid = Grid.from_values([["", ""], ["a", "b"], ["c", "d"], ["e", "f"]])
    scores = score_rows(grid)
    assert scores[1].score == pytest.approx(scores[2].score)
    assert locate_header_row(grid) == 1


def test_header_beyond_scan_window_is_never_found() -> None:
    rows = [["Page %d" % index, ""] for index in range(11)]
    rows.append(["Claim ID", "Amt"])
    rows.append(["C1", 10])
    grid = Grid.from_values(rows)
    assert locate_header_row(grid) == 0
    assert len(score_rows(grid)) == 10


def test_max_rows_limits_the_scan() -> None:
    grid = Grid.from_values(REMITTANCE_WITH_BANNER)
    assert len(score_rows(grid, max_rows=2)) == 2
    assert locate_header_row(grid, max_rows=2) == 0


def test_consistency_counts_only_labelled_columns() -> None:
    grid = Grid.from_values(
        [
            ["Name", ""],
            ["x", 1],
            ["y", "z"],
            ["w", True],
        ]
    )
    assert consistency_score(grid, 0) == 1.0


def test_consistency_rejects_columns_with_three_value_kinds() -> None:
    grid = Grid.from_values([["Col", "Other"], [1, "a"], ["abc", "b"], ["01/02/2024", "c"]])
    assert consistency_score(grid, 0) == 0.5


def test_consistency_is_zero_without_following_rows() -> None:
    grid = Grid.from_values([["ID", "Amt"]])
    assert consistency_score(grid, 0) == 0.0


def test_consistency_looks_at_most_four_rows_ahead() -> None:
    rows = [["Col"], [1], [2], [3], [4], ["text"], ["01/01/2024"]]
    assert consistency_score(Grid.from_values(rows), 0) == 1.0


@pytest.mark.parametrize(
    "cell,expected",
    [
        (Cell.number(1), "number"),
        (Cell.boolean(False), "boolean"),
        (Cell.timestamp(datetime(2024, 1, 1)), "date"),
        (Cell.text("01/02/2024"), "date"),
        (Cell.text("12.5"), "numeric-text"),
        (Cell.text("0x1F"), "numeric-text"),
        (Cell.text("abc"), "text"),
    ],
)
def test_value_category(cell: Cell, expected: str) -> None:
    assert value_category(cell) == expected
