from __future__ import annotations

import re
from datetime import datetime

# Day/month/year style text such as "01/02/2024", "1-2-24" or "01.02.2024".
_DATE_LIKE = re.compile(r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}")


def is_date_like(text: str) -> bool:
    return bool(_DATE_LIKE.fullmatch(text))


def format_excel_date(value: datetime) -> str:
    """Render a date cell for export, e.g. 2024-03-05 14:07:09 -> "05/03/2024  2:07:09 PM".

    Midnight values render as the bare date, e.g. "05/03/2024".
    """
    text = f"{value.day:02d}/{value.month:02d}/{value.year}"
    if value.hour or value.minute or value.second:
        hours12 = value.hour % 12 or 12
        ampm = "PM" if value.hour >= 12 else "AM"
        text += f"  {hours12}:{value.minute:02d}:{value.second:02d} {ampm}"
    return text
