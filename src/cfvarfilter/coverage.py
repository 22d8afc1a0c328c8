from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_DP_FRAC = 0.01


def estimate_depth_cutoff(depths: Sequence[int], dp_frac: float = DEFAULT_DP_FRAC) -> Optional[int]:
    """Minimum depth such that only the lowest ``dp_frac`` of depth mass falls below it.

    Depths are sorted ascending and accumulated; the cutoff is the first depth
    at which the running share of the total strictly exceeds ``dp_frac``.

    Returns None when no cutoff can be determined (no depths, all-zero depths,
    or ``dp_frac >= 1``). Callers treat None as a cutoff of 0.
    """
    arr = np.sort(np.asarray(depths, dtype=np.int64))
    total = int(arr.sum()) if arr.size else 0
    if total <= 0:
        logger.warning(
            "Depth distribution is empty (%d variants, total depth 0); no depth cutoff determined.",
            int(arr.size),
        )
        return None

    share = np.cumsum(arr) / float(total)
    above = np.flatnonzero(share > dp_frac)
    if above.size == 0:
        logger.warning("No depth exceeds dp_frac=%g of the total; no depth cutoff determined.", dp_frac)
        return None

    cutoff = int(arr[above[0]])
    logger.info("Depth cutoff %d (dp_frac=%g, %d variants, total depth %d)", cutoff, dp_frac, arr.size, total)
    return cutoff
