import pathlib

import numpy as np


def frame_score_loader(scores_dir: str | pathlib.Path):
    """Return a loader mapping a meeting id to ``<scores_dir>/<meeting>.npy``."""

    base = pathlib.Path(scores_dir)

    def load(meeting_id: str) -> np.ndarray:
        path = base / f"{meeting_id}.npy"
        if not path.exists():
            raise FileNotFoundError(f"missing score file {path}")
        return np.load(path, allow_pickle=False)

    return load
