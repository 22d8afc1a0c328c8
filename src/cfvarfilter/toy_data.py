from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pysam

from .utils import ensure_outdir, write_json

_CONTIG = "chr1"
_CONTIG_LEN = 1_000_000
_BASES = ["A", "C", "G", "T"]


def _mutate_base(base: str) -> str:
    for alt in _BASES:
        if alt != base:
            return alt
    return "A"


def _make_header() -> pysam.VariantHeader:
    header = pysam.VariantHeader()
    header.add_meta("fileformat", "VCFv4.2")
    header.add_sample("SAMPLE")
    header.contigs.add(_CONTIG, length=_CONTIG_LEN)
    header.info.add("FS", number=1, type="Float", description="Fisher strand bias (phred)")
    header.info.add("QD", number=1, type="Float", description="Variant confidence by depth")
    header.info.add("MQ", number=1, type="Float", description="RMS mapping quality")
    header.info.add("SOR", number=1, type="Float", description="Strand odds ratio")
    header.formats.add("GT", number=1, type="String", description="Genotype")
    header.formats.add("AD", number="R", type="Integer", description="Allelic depths")
    header.formats.add("DP", number=1, type="Integer", description="Read depth")
    return header


def _write_vcf(path: Path, calls: List[Tuple[int, str, str, float, int, int]]) -> None:
    """Write (pos1, ref, alt, qual, ref_count, alt_count) calls as a single-sample VCF."""
    header = _make_header()
    with pysam.VariantFile(str(path), "w", header=header) as vcf:
        for pos1, ref, alt, qual, ref_count, alt_count in sorted(calls):
            rec = vcf.new_record(
                contig=_CONTIG,
                start=pos1 - 1,
                stop=pos1,
                alleles=(ref, alt),
                qual=qual,
                filter="PASS",
            )
            # INFO order is kept on write; SOR last so every checked key ends with ';'.
            rec.info["FS"] = 2.5
            rec.info["QD"] = 15.0
            rec.info["MQ"] = 60.0
            rec.info["SOR"] = 0.7
            rec.samples[0]["GT"] = (0, 1)
            rec.samples[0]["AD"] = (ref_count, alt_count)
            rec.samples[0]["DP"] = ref_count + alt_count
            vcf.write(rec)


def make_toy_data(*, outdir: str | Path, seed: int = 7) -> Dict[str, Any]:
    """Create a tiny tumor VCF and a matching control VCF for demos/tests.

    The tumor file holds germline heterozygous calls (also present in the
    control), a handful of somatic calls, low-QUAL calls and one shallow call.
    Every call except the shallow one has a depth of 100.

    The outputs include:
    - tumor.vcf
    - control.vcf.gz (+ .tbi)
    - toy_summary.json

    Returns
    -------
    dict
        Paths to the generated files and the expected survivor counts for
        default thresholds.
    """
    outdir_p = ensure_outdir(outdir)
    rng = random.Random(seed)

    def next_call(pos1: int) -> Tuple[int, str, str]:
        ref = rng.choice(_BASES)
        return pos1, ref, _mutate_base(ref)

    germline: List[Tuple[int, str, str, float, int, int]] = []
    for i in range(40):
        pos1, ref, alt = next_call(10_000 + 1_000 * i)
        d = rng.randint(-5, 5)
        germline.append((pos1, ref, alt, 2000.0, 50 + d, 50 - d))

    somatic: List[Tuple[int, str, str, float, int, int]] = []
    for i in range(6):
        pos1, ref, alt = next_call(500_000 + 1_000 * i)
        somatic.append((pos1, ref, alt, 1800.0, 70, 30))

    low_qual: List[Tuple[int, str, str, float, int, int]] = []
    for i in range(3):
        pos1, ref, alt = next_call(700_000 + 1_000 * i)
        low_qual.append((pos1, ref, alt, 500.0, 60, 40))

    pos1, ref, alt = next_call(900_000)
    shallow = [(pos1, ref, alt, 2500.0, 2, 1)]

    tumor_vcf = outdir_p / "tumor.vcf"
    _write_vcf(tumor_vcf, germline + somatic + low_qual + shallow)

    control_plain = outdir_p / "control.vcf"
    _write_vcf(control_plain, germline)
    control_vcf = outdir_p / "control.vcf.gz"
    pysam.tabix_compress(str(control_plain), str(control_vcf), force=True)
    pysam.tabix_index(str(control_vcf), preset="vcf", force=True)
    control_plain.unlink()

    summary = {
        "tumor_vcf": str(tumor_vcf),
        "control_vcf": str(control_vcf),
        "outdir": str(outdir_p),
        "expected_pass": len(germline) + len(somatic),
        "expected_somatic": len(somatic),
    }

    write_json(outdir_p / "toy_summary.json", summary)
    return summary
