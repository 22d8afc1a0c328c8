"""cfvarfilter: high-confidence variant filtering for tumor / cell-free DNA call sets.

Public API is intentionally small; most users should use the CLI:

    cfvarfilter filter --tumor tumor.vcf --out filtered.vcf

"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
