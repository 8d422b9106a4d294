from __future__ import annotations

from typing import Optional

import pandas as pd


ALL = "all"


def search_frame(df: pd.DataFrame, term: Optional[str], columns: list[str]) -> pd.DataFrame:
    """
    Case-insensitive substring match over `columns` (OR-ed).

    Empty term -> unchanged frame. Columns missing from the frame (e.g. an embed that
    was null on every row) never match.
    """
    if not term or df.empty:
        return df
    needle = term.lower()
    mask = pd.Series(False, index=df.index)
    for col in columns:
        if col in df.columns:
            mask |= df[col].fillna("").astype(str).str.lower().str.contains(needle, regex=False)
    return df[mask]


def filter_by_parent(df: pd.DataFrame, column: str, parent_id: Optional[str]) -> pd.DataFrame:
    """Parent dropdown filter: `"all"` (or nothing) keeps every row."""
    if not parent_id or parent_id == ALL or df.empty:
        return df
    if column not in df.columns:
        return df.iloc[0:0]
    return df[df[column] == parent_id]
