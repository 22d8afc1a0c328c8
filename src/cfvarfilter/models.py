from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

KEY_SEP = "_"


@dataclass(frozen=True)
class Variant:
    """One tumor variant call, as read from a single input record.

    Attributes
    ----------
    chrom, pos, ref, alt:
        Columns 0, 1, 3 and 4 of the record, kept as text.
    line:
        The original record without its trailing newline. Written back verbatim.
    qual:
        QUAL column value, or None if missing/non-numeric.
    fs, qd, mq:
        INFO values for FS/QD/MQ. None means the key was not found.
    ref_count, alt_count:
        Allelic depths from the sample AD subfield. None when the format column
        does not declare both AD and DP.
    """

    chrom: str
    pos: str
    ref: str
    alt: str
    line: str
    qual: Optional[float] = None
    fs: Optional[float] = None
    qd: Optional[float] = None
    mq: Optional[float] = None
    ref_count: Optional[int] = None
    alt_count: Optional[int] = None

    @property
    def key(self) -> str:
        return KEY_SEP.join((self.chrom, self.pos, self.ref, self.alt))

    @property
    def has_counts(self) -> bool:
        return self.ref_count is not None and self.alt_count is not None

    @property
    def depth(self) -> Optional[int]:
        if not self.has_counts:
            return None
        return self.ref_count + self.alt_count  # type: ignore[operator]

    @property
    def vaf(self) -> Optional[float]:
        depth = self.depth
        if not depth:
            return None
        return self.alt_count / depth  # type: ignore[operator]


@dataclass(frozen=True)
class FilterThresholds:
    """Static admission thresholds plus the impurity test p-value cutoff."""

    qual: float = 1500.0
    fs: float = 70.0
    qd: float = 0.8
    mq: float = 40.0
    fs_pv: float = 0.01


@dataclass(frozen=True)
class PurityEstimate:
    """Result of the VAF symmetry scan.

    ``offset`` is the scan position x (0.00-0.49) with the highest symmetry
    score, i.e. half the deviation of the heterozygous peaks from 0.5. It is
    reported but not used for admission; ``ref_total``/``alt_total`` are.
    """

    offset: Optional[float]
    max_score: int
    scores: List[int]
    histogram: Dict[int, int]
    ref_total: int
    alt_total: int

    @property
    def purity(self) -> Optional[float]:
        if self.offset is None:
            return None
        return round(1.0 - 2.0 * self.offset, 2)

    @property
    def n_variants(self) -> int:
        return sum(self.histogram.values())


@dataclass
class FilterRun:
    """Bookkeeping for one pipeline run; serialised into summary.json."""

    tumor_path: str
    out_path: str
    control_paths: List[str]
    somatic: bool
    impure: bool
    dp_frac: float
    thresholds: FilterThresholds
    depth_cutoff: Optional[int] = None
    purity: Optional[PurityEstimate] = None
    depths: List[int] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)

    def to_summary(self) -> Dict[str, Any]:
        purity: Dict[str, Any] = {}
        if self.purity is not None:
            purity = {
                "offset": self.purity.offset,
                "purity": self.purity.purity,
                "max_score": self.purity.max_score,
                "scores": list(self.purity.scores),
                "vaf_histogram": {str(k): v for k, v in sorted(self.purity.histogram.items())},
                "ref_total": self.purity.ref_total,
                "alt_total": self.purity.alt_total,
            }
        return {
            "tumor_path": self.tumor_path,
            "out_path": self.out_path,
            "control_paths": list(self.control_paths),
            "somatic": self.somatic,
            "impure": self.impure,
            "dp_frac": self.dp_frac,
            "thresholds": {
                "qual": self.thresholds.qual,
                "fs": self.thresholds.fs,
                "qd": self.thresholds.qd,
                "mq": self.thresholds.mq,
                "fs_pv": self.thresholds.fs_pv,
            },
            "depth_cutoff": self.depth_cutoff,
            "purity": purity,
            "counts": dict(self.counts),
        }
