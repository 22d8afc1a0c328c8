from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .models import KEY_SEP, Variant
from .utils import open_textmaybe_gzip

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
DEFAULT_INFO_COL = 7
DEFAULT_FMT_COL = 8

_QUAL_COL = 5
_KEY_COLS = (0, 1, 3, 4)
_AD_RE = re.compile(r"(\d+),(\d+)")
_INFO_KEYS = ("FS", "QD", "MQ")
# Key must start the column or follow a ';' so that e.g. RAW_MQ= is not read as MQ=.
_INFO_RE = {k: re.compile(rf"(?:^|;){k}=(.*?);") for k in _INFO_KEYS}


def is_comment(line: str) -> bool:
    return line.startswith(COMMENT_PREFIX)


def variant_key(columns: Sequence[str]) -> Optional[str]:
    """Identity key CHROM_POS_REF_ALT, or None if the record is too short."""
    if len(columns) <= max(_KEY_COLS):
        return None
    return KEY_SEP.join(columns[i] for i in _KEY_COLS)


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _column(columns: Sequence[str], idx: int) -> Optional[str]:
    if 0 <= idx < len(columns):
        return columns[idx]
    return None


def parse_info_value(info: str, key: str) -> Optional[float]:
    """First ``KEY=value;`` occurrence in an INFO string, as float. ``key`` is FS, QD or MQ."""
    m = _INFO_RE[key].search(info)
    if m is None:
        return None
    return _to_float(m.group(1))


def parse_allele_depths(fmt: Optional[str], sample: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    """(ref, alt) counts from the AD subfield.

    Returns (None, None) unless the format declares both AD and DP and the sample
    column is present. An AD value that does not look like ``int,int`` gives
    (0, 0).
    """
    if fmt is None:
        return None, None
    names = fmt.split(":")
    ad_idx: Optional[int] = None
    dp_idx: Optional[int] = None
    for i, name in enumerate(names):
        if name == "AD":
            ad_idx = i
        elif name == "DP":
            dp_idx = i
    if ad_idx is None or dp_idx is None or sample is None:
        return None, None
    values = sample.split(":")
    ad = values[ad_idx] if ad_idx < len(values) else ""
    m = _AD_RE.search(ad)
    if m is None:
        return 0, 0
    return int(m.group(1)), int(m.group(2))


def parse_record(
    line: str,
    *,
    info_col: int = DEFAULT_INFO_COL,
    fmt_col: int = DEFAULT_FMT_COL,
) -> Optional[Variant]:
    """Parse one record line into a Variant.

    Comment lines, blank lines and lines too short to form an identity key
    return None. Every other anomaly is absorbed as missing data.
    """
    line = line.rstrip("\r\n")
    if is_comment(line):
        return None
    columns = line.split()
    if variant_key(columns) is None:
        return None

    info = _column(columns, info_col) or ""
    ref_count, alt_count = parse_allele_depths(_column(columns, fmt_col), _column(columns, fmt_col + 1))

    return Variant(
        chrom=columns[0],
        pos=columns[1],
        ref=columns[3],
        alt=columns[4],
        line=line,
        qual=_to_float(_column(columns, _QUAL_COL)),
        fs=parse_info_value(info, "FS"),
        qd=parse_info_value(info, "QD"),
        mq=parse_info_value(info, "MQ"),
        ref_count=ref_count,
        alt_count=alt_count,
    )


def iter_variants(
    lines: Iterable[str],
    *,
    info_col: int = DEFAULT_INFO_COL,
    fmt_col: int = DEFAULT_FMT_COL,
) -> Iterable[Variant]:
    for line in lines:
        v = parse_record(line, info_col=info_col, fmt_col=fmt_col)
        if v is not None:
            yield v


def collect_variants(variants: Iterable[Variant]) -> Dict[str, Variant]:
    """Key variants by identity; a later duplicate replaces an earlier one."""
    by_key: Dict[str, Variant] = {}
    for v in variants:
        if v.key in by_key:
            logger.debug("Duplicate variant %s; keeping last occurrence", v.key)
        by_key[v.key] = v
    return by_key


def read_variants(
    path: str | Path,
    *,
    info_col: int = DEFAULT_INFO_COL,
    fmt_col: int = DEFAULT_FMT_COL,
    progress: bool = False,
) -> Dict[str, Variant]:
    """Read every tumor record into a dict keyed by identity key."""
    with open_textmaybe_gzip(path, "rt", role="tumor") as fh:
        lines: Iterable[str] = fh
        if progress:
            lines = tqdm(fh, unit="line", desc="Reading tumor records")
        variants = collect_variants(iter_variants(lines, info_col=info_col, fmt_col=fmt_col))

    n_depth = sum(1 for v in variants.values() if v.has_counts)
    logger.info(
        "Read %d tumor variants from %s (%d with AD/DP allele depths)",
        len(variants),
        path,
        n_depth,
    )
    return variants


def depth_distribution(variants: Dict[str, Variant]) -> List[int]:
    """Total depth of every variant whose allele depths were parsed."""
    return [v.depth for v in variants.values() if v.depth is not None]
