from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt

from .purity import symmetry_positions

logger = logging.getLogger(__name__)


def plot_vaf_hist(
    *,
    histogram: Dict[int, int],
    offset: Optional[float],
    out_png: str | Path,
    title: str = "Variant allele fraction",
) -> None:
    """Bar plot of the percent-bucketed VAF histogram.

    The six symmetric positions of the best offset, if any, are marked with
    dashed lines.
    """
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    xs = list(range(0, 101))
    ys = [int(histogram.get(x, 0)) for x in xs]

    plt.figure()
    plt.bar([x / 100.0 for x in xs], ys, width=0.01, align="center")
    if offset is not None:
        for p in sorted(set(symmetry_positions(int(round(offset * 100))))):
            plt.axvline(p / 100.0, color="tab:red", linestyle="--", linewidth=0.8)
    plt.xlabel("VAF")
    plt.ylabel("Variant count")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()


def plot_symmetry_scores(
    *,
    scores: List[int],
    out_png: str | Path,
    title: str = "Purity offset scan",
) -> None:
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    xs = [i / 100.0 for i in range(len(scores))]

    plt.figure()
    plt.plot(xs, scores, marker="o", markersize=3)
    plt.xlabel("Offset x")
    plt.ylabel("Symmetry score")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()


def plot_depth_hist(
    *,
    depths: List[int],
    depth_cutoff: Optional[int],
    out_png: str | Path,
    title: str = "Depth of coverage",
    nbins: int = 50,
) -> None:
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    plt.figure()
    if depths:
        plt.hist(depths, bins=nbins)
    if depth_cutoff is not None:
        plt.axvline(depth_cutoff, color="tab:red", linestyle="--", label=f"cutoff = {depth_cutoff}")
        plt.legend()
    plt.xlabel("Depth (ref + alt reads)")
    plt.ylabel("Variant count")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()


def plot_removal_counts(
    *,
    counts: Dict[str, int],
    out_png: str | Path,
    title: str = "Variants removed per filter",
) -> None:
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    labels = []
    values = []
    for k, v in counts.items():
        if k.startswith("removed_"):
            labels.append(k[len("removed_") :])
            values.append(int(v))
    labels.append("written")
    values.append(int(counts.get("variants_written", 0)))

    plt.figure()
    plt.bar(labels, values)
    plt.ylabel("Variant count")
    plt.title(title)
    plt.xticks(rotation=15, ha="right")
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()
