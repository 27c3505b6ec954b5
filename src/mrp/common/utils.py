from __future__ import annotations

import os
import random
from datetime import datetime

import numpy as np


def log(msg: str) -> None:
    print(f"[{datetime.now().strftime('%H:%M:%S')}] {msg}", flush=True)


def set_seed(seed: int) -> None:
    """
    Seed python + numpy for reproducible splits and model fits.
    """
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    np.random.seed(seed)
