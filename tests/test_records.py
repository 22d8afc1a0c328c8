from pathlib import Path

import pytest

from cfvarfilter.models import Variant
from cfvarfilter.records import (
    collect_variants,
    depth_distribution,
    parse_allele_depths,
    parse_info_value,
    parse_record,
    read_variants,
    variant_key,
)
from cfvarfilter.utils import VariantFileError


def make_line(
    chrom: str = "chr1",
    pos: int = 100,
    ref: str = "A",
    alt: str = "G",
    qual: str = "2000",
    info: str = "FS=10;QD=1.2;MQ=50;",
    fmt: str = "GT:AD:DP",
    sample: str = "0/1:50,50:100",
) -> str:
    return "\t".join([chrom, str(pos), ".", ref, alt, qual, "PASS", info, fmt, sample])


def test_parse_record_fields() -> None:
    line = make_line()
    v = parse_record(line + "\n")
    assert v is not None
    assert v.key == "chr1_100_A_G"
    assert v.line == line
    assert v.qual == 2000.0
    assert (v.fs, v.qd, v.mq) == (10.0, 1.2, 50.0)
    assert (v.ref_count, v.alt_count) == (50, 50)
    assert v.depth == 100
    assert v.vaf == pytest.approx(0.5)


def test_comment_and_blank_lines_are_skipped() -> None:
    assert parse_record("#CHROM\tPOS\tID\tREF\tALT\n") is None
    assert parse_record("##fileformat=VCFv4.2\n") is None
    assert parse_record("\n") is None
    assert parse_record("chr1\t100\t.\n") is None


def test_info_first_match_wins() -> None:
    assert parse_info_value("FS=1.5;FS=99;", "FS") == 1.5


def test_info_key_must_be_whole() -> None:
    # RAW_MQ must not be read as MQ
    assert parse_info_value("RAW_MQ=10;MQ=55;", "MQ") == 55.0
    assert parse_info_value("RAW_MQ=10;", "MQ") is None


def test_info_value_needs_terminating_semicolon() -> None:
    v = parse_record(make_line(info="FS=10;QD=1.2;MQ=50"))
    assert v is not None
    assert v.fs == 10.0
    assert v.qd == 1.2
    assert v.mq is None


def test_missing_info_fields_are_none_not_zero() -> None:
    v = parse_record(make_line(info="AC=1;AF=0.5;"))
    assert v is not None
    assert v.fs is None and v.qd is None and v.mq is None


def test_non_numeric_qual_is_none() -> None:
    v = parse_record(make_line(qual="."))
    assert v is not None
    assert v.qual is None


def test_missing_ad_or_dp_leaves_counts_unknown() -> None:
    v = parse_record(make_line(fmt="GT:AD:GQ", sample="0/1:50,50:99"))
    assert v is not None
    assert v.ref_count is None and v.alt_count is None
    assert v.depth is None and v.vaf is None

    v = parse_record(make_line(fmt="GT:DP", sample="0/1:100"))
    assert v is not None
    assert not v.has_counts


def test_unparseable_ad_defaults_to_zero() -> None:
    assert parse_allele_depths("GT:AD:DP", "0/1:.:0") == (0, 0)
    v = parse_record(make_line(sample="0/1:.:0"))
    assert v is not None
    assert (v.ref_count, v.alt_count) == (0, 0)
    assert v.depth == 0
    assert v.vaf is None


def test_ad_position_follows_format() -> None:
    assert parse_allele_depths("DP:GT:AD", "30:0/1:12,18") == (12, 18)


def test_custom_columns() -> None:
    line = "\t".join(["chr2", "5", ".", "C", "T", "3000", "FS=1;QD=2;MQ=60;", "GT:AD:DP", "0/1:7,3:10"])
    v = parse_record(line, info_col=6, fmt_col=7)
    assert v is not None
    assert v.mq == 60.0
    assert (v.ref_count, v.alt_count) == (7, 3)


def test_variant_key() -> None:
    assert variant_key(["chr1", "10", "rs1", "A", "T", "50"]) == "chr1_10_A_T"
    assert variant_key(["chr1", "10"]) is None


def test_duplicate_key_last_occurrence_wins() -> None:
    first = parse_record(make_line(qual="100"))
    second = parse_record(make_line(qual="3000", fmt="GT", sample="0/1"))
    assert first is not None and second is not None
    variants = collect_variants([first, second])
    assert list(variants) == ["chr1_100_A_G"]
    assert variants["chr1_100_A_G"].qual == 3000.0
    assert not variants["chr1_100_A_G"].has_counts


def test_read_variants_and_depths(tmp_path: Path) -> None:
    path = tmp_path / "tumor.vcf"
    path.write_text(
        "##fileformat=VCFv4.2\n"
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS\n"
        + make_line(pos=1, sample="0/1:30,10:40") + "\n"
        + make_line(pos=2, fmt="GT", sample="0/1") + "\n"
        + make_line(pos=3, sample="0/1:5,5:10") + "\n",
        encoding="utf-8",
    )
    variants = read_variants(path)
    assert sorted(variants) == ["chr1_1_A_G", "chr1_2_A_G", "chr1_3_A_G"]
    assert sorted(depth_distribution(variants)) == [10, 40]


def test_read_variants_missing_file(tmp_path: Path) -> None:
    with pytest.raises(VariantFileError) as exc:
        read_variants(tmp_path / "absent.vcf")
    assert "tumor" in str(exc.value)
    assert "absent.vcf" in str(exc.value)


def test_variant_vaf_guard() -> None:
    v = Variant(chrom="1", pos="1", ref="A", alt="C", line="", ref_count=0, alt_count=0)
    assert v.depth == 0
    assert v.vaf is None


def test_missing_sample_column_leaves_counts_unknown() -> None:
    assert parse_allele_depths("GT:AD:DP", None) == (None, None)
    line = "\t".join(["chr1", "7", ".", "A", "G", "2000", "PASS", "FS=1;QD=2;MQ=60;", "GT:AD:DP"])
    v = parse_record(line)
    assert v is not None
    assert not v.has_counts
    assert depth_distribution({v.key: v}) == []


def test_sample_without_ad_value_defaults_to_zero() -> None:
    # sample column present but shorter than the format
    assert parse_allele_depths("GT:DP:AD", "0/1:10") == (0, 0)
