from __future__ import annotations

# Header detection looks no deeper than this into a sheet.
HEADER_SCAN_ROWS = 10
HEADER_LOOKAHEAD_ROWS = 4
HEADER_MIN_SCORE = 0.2

HEADER_TERMS: tuple[str, ...] = (
    "id",
    "name",
    "date",
    "number",
    "code",
    "description",
    "amount",
    "quantity",
    "price",
    "total",
    "address",
    "phone",
    "email",
    "status",
    "mobile",
    "patient",
    "doctor",
    "bill",
    "ins",
    "file",
    "card",
    "payer",
    "claim",
    "sender",
    "service",
    "net",
    "clinician",
    "denial",
    "submission",
    "remittance",
    "billno",
    "fileno",
    "qty",
    "amt",
)

# Banner/summary vocabulary that marks a row as report furniture rather than a header.
NOISE_WORDS: tuple[str, ...] = ("garbage", "page", "report", "generated", "total", "summary")

FEATURE_WEIGHTS: dict[str, float] = {
    "fill_rate": 0.20,
    "text_ratio": 0.25,
    "term_score": 0.10,
    "uniqueness_ratio": 0.15,
    "consistency_score": 0.30,
}
NOISE_PENALTY = 0.3
SINGLE_VALUE_PENALTY = 0.2

TARGET_ID_FALLBACK = "Claim ID"

# Enrichment columns inserted after the target's "Amt" column.
AMT_FIELD = "Amt"
REMIT_AMT_FIELD = "Remit Amt"
REJECTED_AMOUNT_FIELD = "Rejected Amount"

MATCHED_FILENAME = "matched_records.xlsx"
UNMATCHED_FILENAME = "unmatched_records.xlsx"
MATCHED_SHEET = "Matched Records"
UNMATCHED_SHEET = "Unmatched Records"

# ARGB fills used by the workbook writer.
HEADER_FILL = "FFCCCCCC"
REMIT_LOW_FILL = "FFFFFF00"  # remit amount below half of Amt
REMIT_OK_FILL = "FF90EE90"
REMIT_LOW_RATIO = 0.5
MAX_COLUMN_WIDTH = 50

SUPPORTED_EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")
SUPPORTED_CSV_SUFFIXES = (".csv",)
