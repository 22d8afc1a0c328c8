from __future__ import annotations

import logging
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


def check_fraction(value: float, name: str) -> None:
    """Ensure a fraction/p-value option lies in [0, 1]; raise ValueError otherwise."""
    if not 0.0 <= float(value) <= 1.0:
        raise ValueError(f"{name} must be between 0 and 1 (got {value}).")


def check_columns(info_col: int, fmt_col: int) -> None:
    """Ensure column indices are usable; raise ValueError with fix instructions."""
    if info_col < 0 or fmt_col < 0:
        raise ValueError(
            f"Column indices are 0-based and must be non-negative (info_col={info_col}, fmt_col={fmt_col})."
        )
    if info_col == fmt_col:
        raise ValueError(
            f"info_col and fmt_col point at the same column ({info_col}). "
            "For standard VCF use --info_col 7 --fmt_col 8."
        )
    if info_col == fmt_col + 1:
        logger.warning(
            "info_col (%d) is the sample column that follows fmt_col (%d); FS/QD/MQ will likely be missing.",
            info_col,
            fmt_col,
        )


def check_control(somatic: bool, control_paths: Optional[Sequence[str]]) -> None:
    if somatic and not control_paths:
        raise ValueError(
            "Somatic mode needs at least one control VCF. Pass --control FILE[:FILE...]."
        )
