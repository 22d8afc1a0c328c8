"""Sample purity from the shape of the VAF histogram.

Germline heterozygous calls in a pure sample pile up at VAF 0.5. Mixing in a
second genome splits that peak into symmetric pairs (0.5 +/- x, and x / 1 - x
together with 2x / 1 - 2x for calls private to either genome). Scanning x and
summing the histogram at those six positions finds the best fitting offset.

VAFs are bucketed as integer percents so that histogram construction and the
scan use exactly the same keys.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

from .models import PurityEstimate, Variant

logger = logging.getLogger(__name__)

SCAN_STEPS = 50  # x = 0.00 .. 0.49
_PERCENT = 100


def vaf_bucket(vaf: float) -> int:
    """VAF rounded to two decimals, expressed as an integer percent."""
    return int(f"{vaf:.2f}".replace(".", ""))


def build_vaf_histogram(
    variants: Iterable[Variant],
    depth_cutoff: Optional[int],
) -> Tuple[Dict[int, int], int, int]:
    """Histogram of VAF buckets plus summed ref/alt reads of the counted variants.

    Only variants with parsed allele depths, non-zero depth and depth at or
    above the cutoff are counted.
    """
    cutoff = depth_cutoff or 0
    hist: Dict[int, int] = {}
    ref_total = 0
    alt_total = 0
    for v in variants:
        depth = v.depth
        if depth is None or depth == 0 or depth < cutoff:
            continue
        b = vaf_bucket(v.alt_count / depth)  # type: ignore[operator]
        hist[b] = hist.get(b, 0) + 1
        ref_total += v.ref_count  # type: ignore[operator]
        alt_total += v.alt_count  # type: ignore[operator]
    return hist, ref_total, alt_total


def symmetry_positions(step: int) -> Tuple[int, int, int, int, int, int]:
    """Buckets for x, 2x, 0.5-x, 0.5+x, 1-2x and 1-x, with x = step / 100."""
    half = _PERCENT // 2
    return (step, 2 * step, half - step, half + step, _PERCENT - 2 * step, _PERCENT - step)


def symmetry_score(hist: Dict[int, int], step: int) -> int:
    return sum(hist.get(p, 0) for p in symmetry_positions(step))


def scan_offsets(hist: Dict[int, int]) -> Tuple[Optional[int], int, list[int]]:
    """Return (best step, best score, all scores); the first strict maximum wins."""
    scores = []
    best_step: Optional[int] = None
    best_score = 0
    for step in range(SCAN_STEPS):
        s = symmetry_score(hist, step)
        scores.append(s)
        if s > best_score:
            best_score = s
            best_step = step
    return best_step, best_score, scores


def estimate_purity(variants: Iterable[Variant], depth_cutoff: Optional[int]) -> PurityEstimate:
    hist, ref_total, alt_total = build_vaf_histogram(variants, depth_cutoff)
    best_step, best_score, scores = scan_offsets(hist)
    offset = best_step / _PERCENT if best_step is not None else None

    est = PurityEstimate(
        offset=offset,
        max_score=best_score,
        scores=scores,
        histogram=hist,
        ref_total=ref_total,
        alt_total=alt_total,
    )
    if offset is None:
        logger.warning("VAF histogram is empty; purity offset could not be estimated.")
    else:
        logger.info(
            "Purity scan: offset=%.2f (purity ~%.2f, score %d) from %d variants; background reads ref=%d alt=%d",
            offset,
            est.purity,
            best_score,
            est.n_variants,
            ref_total,
            alt_total,
        )
    return est
