# src/mrp/data/splits.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from mrp.common.io import write_json, write_parquet
from mrp.data.schemas import SCHEMA


@dataclass(frozen=True)
class SplitConfig:
    train_frac: float = 0.80
    seed: int = 123
    # stratify on the rating value so each star level keeps ~train_frac in train
    stratify: bool = True
    stratify_column: str = SCHEMA.RATING


def _validate_cfg(cfg: SplitConfig) -> None:
    if cfg.train_frac <= 0 or cfg.train_frac > 1:
        raise ValueError("train_frac must be in (0, 1]")


def _sample_positions(positions: np.ndarray, frac: float, rng: np.random.Generator) -> np.ndarray:
    take = int(np.ceil(len(positions) * frac))
    return rng.permutation(positions)[:take]


def random_split(
    ratings: pd.DataFrame,
    cfg: Optional[SplitConfig] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame, Dict[str, Any]]:
    """
    Seeded row-level train/test partition.

    Contract:
      - deterministic for a fixed seed
      - train ∪ test = all rows, train ∩ test = ∅
      - both parts keep the input's relative row order
    """
    cfg = cfg or SplitConfig()
    _validate_cfg(cfg)

    n = len(ratings)
    rng = np.random.default_rng(cfg.seed)

    if n == 0:
        train_pos = np.array([], dtype=np.int64)
    elif cfg.stratify:
        if cfg.stratify_column not in ratings.columns:
            raise ValueError(f"Missing stratify column: {cfg.stratify_column}")
        groups = ratings.groupby(cfg.stratify_column, sort=True).indices
        parts = [_sample_positions(np.asarray(groups[k]), cfg.train_frac, rng) for k in sorted(groups)]
        train_pos = np.concatenate(parts) if parts else np.array([], dtype=np.int64)
    else:
        train_pos = _sample_positions(np.arange(n), cfg.train_frac, rng)

    mask = np.zeros(n, dtype=bool)
    mask[train_pos] = True

    train = ratings.iloc[np.flatnonzero(mask)].reset_index(drop=True)
    test = ratings.iloc[np.flatnonzero(~mask)].reset_index(drop=True)

    if len(train) + len(test) != n:
        raise RuntimeError("Split produced row loss/gain (train+test != total)")

    meta = {
        "strategy": "stratified_random" if cfg.stratify else "random",
        "seed": int(cfg.seed),
        "n_total": int(n),
        "n_train": int(len(train)),
        "n_test": int(len(test)),
        "frac_train": float(len(train) / max(n, 1)),
        "frac_test": float(len(test) / max(n, 1)),
        "train_frac": float(cfg.train_frac),
    }
    return train, test, meta


def write_splits(
    train: pd.DataFrame,
    test: pd.DataFrame,
    out_dir: Path,
    metadata: Dict[str, Any] | None = None,
) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    write_parquet(out_dir / "train.parquet", train)
    write_parquet(out_dir / "test.parquet", test)
    if metadata is not None:
        write_json(out_dir / "metadata.json", metadata)
