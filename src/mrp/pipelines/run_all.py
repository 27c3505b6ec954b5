# src/mrp/pipelines/run_all.py
from __future__ import annotations

import argparse
from dataclasses import dataclass

from mrp.common.utils import log
from mrp.data.splits import SplitConfig
from mrp.pipelines import build_features, preprocess, score_holdout, train_model


@dataclass(frozen=True)
class RunAllConfig:
    preprocess: preprocess.PreprocessConfig = preprocess.PreprocessConfig()
    features: build_features.BuildFeaturesConfig = build_features.BuildFeaturesConfig()
    train: train_model.TrainModelConfig = train_model.TrainModelConfig()
    holdout: score_holdout.ScoreHoldoutConfig = score_holdout.ScoreHoldoutConfig()
    score_holdout: bool = True


def run(cfg: RunAllConfig) -> None:
    preprocess.run(cfg.preprocess)
    build_features.run(cfg.features)
    train_model.run(cfg.train)
    if cfg.score_holdout:
        score_holdout.run(cfg.holdout)
    else:
        log("Holdout scoring skipped")
    log("✅ Pipeline complete")


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Preprocess -> features -> model -> holdout")
    ap.add_argument("--train-frac", type=float, default=0.80)
    ap.add_argument("--seed", type=int, default=123)
    ap.add_argument("--current-year", type=int, default=None)
    ap.add_argument("--skip-holdout", action="store_true")
    args = ap.parse_args(argv)

    features = build_features.BuildFeaturesConfig(
        split=SplitConfig(train_frac=args.train_frac, seed=args.seed),
        current_year=args.current_year,
    )
    run(RunAllConfig(features=features, score_holdout=not args.skip_holdout))


if __name__ == "__main__":
    main()
