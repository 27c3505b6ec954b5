# src/mrp/data/quality.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

import pandas as pd

from mrp.common.utils import log


@dataclass(frozen=True)
class QualityReport:
    name: str
    n_rows_in: int
    missing_by_column: Dict[str, int] = field(default_factory=dict)
    n_rows_with_missing: int = 0
    n_duplicates_removed: int = 0
    n_rows_out: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def missing_counts(df: pd.DataFrame) -> Dict[str, int]:
    return {str(c): int(n) for c, n in df.isna().sum().items()}


def _narrow_nullable_ints(df: pd.DataFrame) -> pd.DataFrame:
    # safe once no cell is missing
    out = df.copy()
    for c in out.columns:
        if isinstance(out[c].dtype, pd.Int64Dtype):
            out[c] = out[c].astype("int64")
    return out


def filter_table(df: pd.DataFrame, name: str = "table") -> Tuple[pd.DataFrame, QualityReport]:
    """
    Row-level integrity gate applied to every entity table.

    1) any row with a missing cell in any column is dropped (no imputation here)
    2) exact duplicate rows are dropped, first occurrence kept, order preserved

    Post-condition: no missing cells, no duplicate rows, len(out) <= len(df).
    """
    n_in = len(df)
    missing = missing_counts(df)

    log(f"[quality] {name}: missing values per column {missing}")
    out = df
    n_with_missing = 0
    if any(v > 0 for v in missing.values()):
        out = out.dropna(how="any")
        n_with_missing = n_in - len(out)
        log(f"[quality] {name}: removed {n_with_missing:,} rows with missing data")

    n_before_dedup = len(out)
    out = out.drop_duplicates(keep="first")
    n_dups = n_before_dedup - len(out)
    log(f"[quality] {name}: removed {n_dups:,} duplicate rows")

    out = _narrow_nullable_ints(out.reset_index(drop=True))

    report = QualityReport(
        name=name,
        n_rows_in=int(n_in),
        missing_by_column=missing,
        n_rows_with_missing=int(n_with_missing),
        n_duplicates_removed=int(n_dups),
        n_rows_out=int(len(out)),
    )
    return out, report
