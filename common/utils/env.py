"""Environment bootstrap for the API process and scripts."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE_VARIABLE = "ENV_FILE"


def env_file_candidates() -> Tuple[Path, ...]:
    """``$ENV_FILE`` first, then ``./.env``, then the repository ``.env``; duplicates dropped."""

    ordered = []
    explicit = os.getenv(ENV_FILE_VARIABLE)
    if explicit:
        ordered.append(Path(explicit).expanduser())
    ordered.extend([Path.cwd() / ".env", REPO_ROOT / ".env"])
    seen = {}
    for path in ordered:
        seen.setdefault(path.resolve(), path)
    return tuple(seen.values())


@lru_cache(maxsize=8)
def load_env(*paths: str | Path) -> Tuple[Path, ...]:
    """Load every existing env file once and return the ones that were read.

    Values already in the process environment are never overwritten, and an
    earlier file wins over a later one for the same key.
    """

    candidates = tuple(Path(p) for p in paths) or env_file_candidates()
    loaded = []
    for path in candidates:
        if not path.is_file():
            continue
        load_dotenv(path, override=False)
        loaded.append(path)
    if loaded:
        logger.debug("loaded env files: %s", ", ".join(str(p) for p in loaded))
    return tuple(loaded)
