from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .events import EventSink, emit
from .models import Cell, CellKind, Grid
from .schema import (
    FEATURE_WEIGHTS,
    HEADER_LOOKAHEAD_ROWS,
    HEADER_MIN_SCORE,
    HEADER_SCAN_ROWS,
    HEADER_TERMS,
    NOISE_PENALTY,
    NOISE_WORDS,
    SINGLE_VALUE_PENALTY,
)
from .time_utils import is_date_like
from .utils import is_numeric_text


@dataclass
class RowScore:
    """Features and final score of one candidate header row."""

    index: int
    fill_rate: float
    text_ratio: float
    term_score: float
    uniqueness_ratio: float
    consistency_score: float
    has_noise: bool
    single_value: bool

    @property
    def base_score(self) -> float:
        return (
            self.fill_rate * FEATURE_WEIGHTS["fill_rate"]
            + self.text_ratio * FEATURE_WEIGHTS["text_ratio"]
            + self.term_score * FEATURE_WEIGHTS["term_score"]
            + self.uniqueness_ratio * FEATURE_WEIGHTS["uniqueness_ratio"]
            + self.consistency_score * FEATURE_WEIGHTS["consistency_score"]
        )

    @property
    def score(self) -> float:
        score = self.base_score
        if self.has_noise:
            score *= NOISE_PENALTY
        if self.single_value:
            score *= SINGLE_VALUE_PENALTY
        return score


def locate_header_row(grid: Grid, max_rows: int = HEADER_SCAN_ROWS, sink: Optional[EventSink] = None) -> int:
    """Pick the row most likely to hold column names among the first ``max_rows`` rows.

    Falls back to row 0 for an empty grid or when no row scores at least HEADER_MIN_SCORE.
    """
    scores = score_rows(grid, max_rows)
    if not scores:
        emit(sink, "header-row", index=0, score=0.0, reason="empty")
        return 0

    # sorted() is stable, so equal scores keep scan order and the lowest index wins.
    best = sorted(scores, key=lambda item: item.score, reverse=True)[0]
    if best.score < HEADER_MIN_SCORE:
        emit(sink, "header-row", index=0, score=best.score, reason="low-score")
        return 0
    emit(sink, "header-row", index=best.index, score=best.score, reason="best-score")
    return best.index


def score_rows(grid: Grid, max_rows: int = HEADER_SCAN_ROWS) -> List[RowScore]:
    """Score every row in the scan window independently; zero-width rows are skipped."""
    scores: List[RowScore] = []
    for index in range(min(max_rows, len(grid))):
        row = grid.row(index)
        if not row:
            continue
        scores.append(score_row(grid, index))
    return scores


def score_row(grid: Grid, index: int) -> RowScore:
    row = grid.row(index)
    length = len(row)
    filled = [cell for cell in row if not cell.is_empty]
    texts = [cell.value for cell in row if cell.kind is CellKind.TEXT]

    text_cells = sum(1 for text in texts if not is_numeric_text(text))

    term_hits = 0
    for text in texts:
        lowered = text.lower()
        term_hits += sum(1 for term in HEADER_TERMS if term in lowered)

    distinct = {cell.label().lower() for cell in filled}
    uniqueness = len(distinct) / len(filled) if filled else 0.0

    has_noise = any(word in text.lower() for text in texts for word in NOISE_WORDS)

    return RowScore(
        index=index,
        fill_rate=len(filled) / length,
        text_ratio=text_cells / length,
        term_score=min(term_hits / length, 1.0),
        uniqueness_ratio=uniqueness,
        consistency_score=consistency_score(grid, index),
        has_noise=has_noise,
        single_value=len(filled) == 1,
    )


def consistency_score(grid: Grid, index: int) -> float:
    """Share of labelled columns whose next few rows hold at most two kinds of value."""
    lookahead = min(HEADER_LOOKAHEAD_ROWS, len(grid) - index - 1)
    if lookahead <= 0:
        return 0.0
    header = grid.row(index)
    following = [grid.row(row_index) for row_index in range(index + 1, index + 1 + lookahead)]

    labelled = [column for column, cell in enumerate(header) if not cell.is_empty]
    if not labelled:
        return 0.0

    consistent = 0
    for column in labelled:
        values = [row[column] for row in following if not row[column].is_empty]
        if not values:
            continue
        categories = {value_category(cell) for cell in values}
        if len(categories) <= 2:
            consistent += 1
    return consistent / len(labelled)


def value_category(cell: Cell) -> str:
    if cell.kind is CellKind.NUMBER:
        return "number"
    if cell.kind is CellKind.BOOLEAN:
        return "boolean"
    if cell.kind is CellKind.DATETIME:
        return "date"
    text = str(cell.value)
    if is_date_like(text):
        return "date"
    if is_numeric_text(text):
        return "numeric-text"
    return "text"
