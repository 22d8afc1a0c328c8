from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Set, Tuple

from .models import Variant
from .records import is_comment, variant_key
from .utils import open_textmaybe_gzip

logger = logging.getLogger(__name__)

CONTROL_SEP = ":"


def split_control_paths(control: str | None) -> List[str]:
    """Split a colon-separated list of control files."""
    if not control:
        return []
    return [p for p in control.split(CONTROL_SEP) if p]


def read_control_keys(paths: Iterable[str | Path]) -> Set[str]:
    """Union of identity keys over all control files."""
    keys: Set[str] = set()
    for path in paths:
        n = 0
        with open_textmaybe_gzip(path, "rt", role="control") as fh:
            for line in fh:
                if is_comment(line):
                    continue
                key = variant_key(line.split())
                if key is None:
                    continue
                keys.add(key)
                n += 1
        logger.info("Read %d control records from %s", n, path)
    return keys


def exclude_germline(variants: Dict[str, Variant], control_keys: Set[str]) -> Tuple[Dict[str, Variant], int]:
    """Drop tumor variants whose identity key appears in any control set."""
    kept = {k: v for k, v in variants.items() if k not in control_keys}
    removed = len(variants) - len(kept)
    logger.info("Germline exclusion removed %d of %d variants", removed, len(variants))
    return kept, removed
