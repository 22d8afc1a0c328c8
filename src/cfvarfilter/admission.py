from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from scipy.stats import fisher_exact

from .models import FilterThresholds, PurityEstimate, Variant

logger = logging.getLogger(__name__)


def failed_requirement(
    variant: Variant,
    thresholds: FilterThresholds,
    depth_cutoff: Optional[int],
) -> Optional[str]:
    """Name of the first hard requirement the variant fails, or None if all pass.

    A missing field (no AD/DP, no QUAL, FS/QD/MQ absent from INFO) fails its
    requirement. Zero-depth calls never pass.
    """
    depth = variant.depth
    if depth is None or depth == 0 or depth < (depth_cutoff or 0):
        return "depth"
    if variant.qual is None or variant.qual < thresholds.qual:
        return "qual"
    if variant.fs is None or variant.fs > thresholds.fs:
        return "fs"
    if variant.qd is None or variant.qd < thresholds.qd:
        return "qd"
    if variant.mq is None or variant.mq < thresholds.mq:
        return "mq"
    return None


def passes_hard_filters(
    variant: Variant,
    thresholds: FilterThresholds,
    depth_cutoff: Optional[int],
) -> bool:
    return failed_requirement(variant, thresholds, depth_cutoff) is None


def impurity_pvalue(variant: Variant, ref_total: int, alt_total: int) -> float:
    """Left-tailed Fisher's exact test of the variant's allele balance against the background.

    Table rows are (background ref, background alt) and (variant ref, variant
    alt). Small p-values mean the background ref cell, and hence the variant's
    alt share, is lower than the margins predict.
    """
    table = [
        [int(ref_total), int(alt_total)],
        [int(variant.ref_count or 0), int(variant.alt_count or 0)],
    ]
    _, pvalue = fisher_exact(table, alternative="less")
    return float(pvalue)


def admit_variants(
    variants: Dict[str, Variant],
    thresholds: FilterThresholds,
    depth_cutoff: Optional[int],
    *,
    purity: Optional[PurityEstimate] = None,
    impure: bool = False,
) -> Tuple[Dict[str, Variant], Dict[str, int]]:
    """Keep variants passing every hard requirement and, in impure mode, the Fisher test.

    Returns the surviving variants (keyed as the input) and counts of removals
    per reason. The impurity test only ever removes; it never rescues a variant
    that failed a hard requirement.
    """
    if impure and purity is None:
        raise ValueError("Impure mode needs the background read totals of a purity estimate.")

    removed: Dict[str, int] = {"depth": 0, "qual": 0, "fs": 0, "qd": 0, "mq": 0, "impure": 0}
    kept: Dict[str, Variant] = {}
    for key in sorted(variants):
        v = variants[key]
        reason = failed_requirement(v, thresholds, depth_cutoff)
        if reason is None and impure:
            assert purity is not None
            pv = impurity_pvalue(v, purity.ref_total, purity.alt_total)
            if pv < thresholds.fs_pv:
                reason = "impure"
                logger.debug("%s removed by impurity test (p=%.3g)", key, pv)
        if reason is not None:
            removed[reason] += 1
            continue
        kept[key] = v

    logger.info(
        "Admission: %d of %d variants kept (removed: %s)",
        len(kept),
        len(variants),
        ", ".join(f"{k}={n}" for k, n in removed.items() if n),
    )
    return kept, removed
