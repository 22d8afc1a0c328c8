from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
from typing import Any, TextIO

logger = logging.getLogger(__name__)


class VariantFileError(OSError):
    """A tumor, control or output file could not be opened."""

    def __init__(self, role: str, path: str | Path, reason: str) -> None:
        self.role = role
        self.path = str(path)
        self.reason = reason
        verb = "create" if role == "output" else "open"
        super().__init__(f"Cannot {verb} {role} VCF file '{self.path}': {reason}")


def ensure_outdir(path: str | Path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def open_textmaybe_gzip(path: str | Path, mode: str = "rt", *, role: str = "input") -> TextIO:
    """Open a plain or gzip/bgzip text file, raising VariantFileError on failure."""
    p = str(path)
    try:
        if p.endswith(".gz"):
            return gzip.open(p, mode)  # type: ignore[return-value]
        return open(p, mode)
    except OSError as e:
        raise VariantFileError(role, p, e.strerror or str(e)) from e


def write_json(path: str | Path, obj: Any) -> None:
    with open(path, "wt", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, sort_keys=True)
