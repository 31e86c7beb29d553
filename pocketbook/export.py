"""Tabular export of the transaction log."""
import csv
from datetime import date
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from pocketbook.currency import format_inr
from pocketbook.domain import Transaction

COLUMNS = ["Date", "Category", "Amount (₹)", "Description", "Type"]

Row = Tuple[str, str, str, str, str]


def export_rows(trans: Iterable[Transaction]) -> List[Row]:
    return [
        (
            t.date.isoformat(),
            t.category,
            format_inr(abs(t.amount)),
            t.description or "",
            t.type,
        )
        for t in trans
    ]


def to_frame(trans: Iterable[Transaction]) -> pd.DataFrame:
    return pd.DataFrame(export_rows(trans), columns=COLUMNS)


def to_csv(trans: Iterable[Transaction], path: Optional[str] = None) -> Optional[str]:
    """Every field quoted. Returns the text when no path is given."""
    df = to_frame(trans)
    return df.to_csv(path, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def export_filename(today: date) -> str:
    return f"expense-tracker-{today.isoformat()}.csv"
