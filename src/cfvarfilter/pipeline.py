from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, Optional, Sequence

from .admission import admit_variants
from .coverage import DEFAULT_DP_FRAC, estimate_depth_cutoff
from .germline import exclude_germline, read_control_keys
from .models import FilterRun, FilterThresholds, Variant
from .purity import estimate_purity
from .records import DEFAULT_FMT_COL, DEFAULT_INFO_COL, depth_distribution, read_variants
from .utils import open_textmaybe_gzip
from .validation import check_columns, check_control, check_fraction

logger = logging.getLogger(__name__)


def write_variants(variants: Dict[str, Variant], out_path: str | Path) -> int:
    """Write the original record of every variant, sorted by identity key."""
    n = 0
    with open_textmaybe_gzip(out_path, "wt", role="output") as fh:
        for key in sorted(variants):
            fh.write(variants[key].line + "\n")
            n += 1
    logger.info("Wrote %d variants to %s", n, out_path)
    return n


def run_variant_filtering(
    tumor: str | Path,
    out: str | Path,
    *,
    control: Optional[Sequence[str | Path]] = None,
    info_col: int = DEFAULT_INFO_COL,
    fmt_col: int = DEFAULT_FMT_COL,
    somatic: bool = False,
    impure: bool = False,
    dp_frac: float = DEFAULT_DP_FRAC,
    thresholds: Optional[FilterThresholds] = None,
    progress: bool = False,
) -> FilterRun:
    """Run extraction, depth cutoff, purity scan, admission, germline exclusion and writing.

    Parameters
    ----------
    tumor:
        Tumor record file (plain text or .gz).
    out:
        Output path; receives the surviving records verbatim.
    control:
        Control record files. Required (non-empty) when ``somatic`` is set,
        ignored otherwise.
    info_col, fmt_col:
        0-based INFO and FORMAT column indices; the sample column is fmt_col + 1.
    somatic:
        Remove variants whose identity key appears in any control file.
    impure:
        Apply the Fisher's exact test against the background allele totals.
    dp_frac:
        Fraction of total depth mass allowed below the depth cutoff.
    thresholds:
        QUAL/FS/QD/MQ thresholds and the impurity p-value cutoff.

    Returns
    -------
    FilterRun
        Cutoff, purity estimate, depths and per-stage counts of the run.
    """
    thresholds = thresholds or FilterThresholds()
    control_paths = [str(p) for p in (control or [])]
    check_columns(info_col, fmt_col)
    check_fraction(dp_frac, "dp_frac")
    check_fraction(thresholds.fs_pv, "fs_pv")
    check_control(somatic, control_paths)

    t0 = time.time()
    run = FilterRun(
        tumor_path=str(tumor),
        out_path=str(out),
        control_paths=control_paths if somatic else [],
        somatic=somatic,
        impure=impure,
        dp_frac=float(dp_frac),
        thresholds=thresholds,
    )

    variants = read_variants(tumor, info_col=info_col, fmt_col=fmt_col, progress=progress)
    run.counts["variants_total"] = len(variants)

    run.depths = depth_distribution(variants)
    run.counts["variants_with_depth"] = len(run.depths)
    run.depth_cutoff = estimate_depth_cutoff(run.depths, dp_frac)

    run.purity = estimate_purity(variants.values(), run.depth_cutoff)

    surviving, removed = admit_variants(
        variants,
        thresholds,
        run.depth_cutoff,
        purity=run.purity,
        impure=impure,
    )
    for reason, n in removed.items():
        run.counts[f"removed_{reason}"] = n

    if somatic:
        control_keys = read_control_keys(control_paths)
        surviving, n_germline = exclude_germline(surviving, control_keys)
        run.counts["removed_germline"] = n_germline

    run.counts["variants_written"] = write_variants(surviving, out)
    logger.info(
        "Filtering finished in %.2fs: %d of %d variants written",
        time.time() - t0,
        run.counts["variants_written"],
        run.counts["variants_total"],
    )
    return run
