from dataclasses import replace

import pytest

from cfvarfilter.admission import admit_variants, failed_requirement, impurity_pvalue, passes_hard_filters
from cfvarfilter.models import FilterThresholds, PurityEstimate, Variant

THRESHOLDS = FilterThresholds()


def good_variant(pos: int = 100, ref_count=50, alt_count=50) -> Variant:
    return Variant(
        chrom="chr1",
        pos=str(pos),
        ref="A",
        alt="G",
        line=f"chr1\t{pos}\t.\tA\tG",
        qual=2000.0,
        fs=10.0,
        qd=1.2,
        mq=50.0,
        ref_count=ref_count,
        alt_count=alt_count,
    )


def background(ref_total: int, alt_total: int) -> PurityEstimate:
    return PurityEstimate(
        offset=0.0,
        max_score=1,
        scores=[0] * 50,
        histogram={50: 1},
        ref_total=ref_total,
        alt_total=alt_total,
    )


def test_good_variant_passes() -> None:
    assert passes_hard_filters(good_variant(), THRESHOLDS, depth_cutoff=100)


def test_thresholds_are_inclusive() -> None:
    v = replace(good_variant(), qual=1500.0, fs=70.0, qd=0.8, mq=40.0)
    assert passes_hard_filters(v, THRESHOLDS, depth_cutoff=100)


@pytest.mark.parametrize(
    "change, reason",
    [
        ({"qual": 1499.0}, "qual"),
        ({"fs": 70.5}, "fs"),
        ({"qd": 0.79}, "qd"),
        ({"mq": 39.9}, "mq"),
        ({"qual": None}, "qual"),
        ({"fs": None}, "fs"),
        ({"qd": None}, "qd"),
        ({"mq": None}, "mq"),
        ({"ref_count": None, "alt_count": None}, "depth"),
        ({"ref_count": 10, "alt_count": 10}, "depth"),
    ],
)
def test_each_requirement_is_needed(change, reason) -> None:
    v = replace(good_variant(), **change)
    assert failed_requirement(v, THRESHOLDS, depth_cutoff=100) == reason
    kept, removed = admit_variants({v.key: v}, THRESHOLDS, depth_cutoff=100)
    assert kept == {}
    assert removed[reason] == 1


def test_zero_depth_fails_without_cutoff() -> None:
    v = good_variant(ref_count=0, alt_count=0)
    assert failed_requirement(v, THRESHOLDS, depth_cutoff=None) == "depth"
    assert failed_requirement(v, THRESHOLDS, depth_cutoff=0) == "depth"


def test_no_cutoff_admits_any_positive_depth() -> None:
    assert passes_hard_filters(good_variant(ref_count=1, alt_count=0), THRESHOLDS, depth_cutoff=None)


def test_custom_thresholds() -> None:
    strict = FilterThresholds(qual=2500)
    assert failed_requirement(good_variant(), strict, depth_cutoff=None) == "qual"


def test_balanced_variant_is_not_flagged() -> None:
    pv = impurity_pvalue(good_variant(ref_count=50, alt_count=50), 5000, 5000)
    assert pv > 0.3


def test_ref_heavy_variant_is_flagged() -> None:
    pv = impurity_pvalue(good_variant(ref_count=100, alt_count=0), 5000, 5000)
    assert pv < 0.01


def test_alt_heavy_variant_is_not_flagged() -> None:
    pv = impurity_pvalue(good_variant(ref_count=0, alt_count=100), 5000, 5000)
    assert pv > 0.99


def test_impure_mode_removes_only_inconsistent_calls() -> None:
    balanced = good_variant(pos=1, ref_count=50, alt_count=50)
    artifact = good_variant(pos=2, ref_count=100, alt_count=0)
    variants = {balanced.key: balanced, artifact.key: artifact}

    kept, removed = admit_variants(variants, THRESHOLDS, 100, purity=background(5000, 5000), impure=True)
    assert list(kept) == [balanced.key]
    assert removed["impure"] == 1

    kept, _ = admit_variants(variants, THRESHOLDS, 100, purity=background(5000, 5000), impure=False)
    assert sorted(kept) == sorted(variants)


def test_impurity_test_never_rescues() -> None:
    v = replace(good_variant(ref_count=0, alt_count=100), qual=10.0)
    kept, removed = admit_variants({v.key: v}, THRESHOLDS, 100, purity=background(5000, 5000), impure=True)
    assert kept == {}
    assert removed["qual"] == 1
    assert removed["impure"] == 0


def test_impure_mode_requires_background() -> None:
    with pytest.raises(ValueError):
        admit_variants({}, THRESHOLDS, None, impure=True)


def test_fs_pv_threshold_is_strict() -> None:
    v = good_variant(ref_count=100, alt_count=0)
    pv = impurity_pvalue(v, 5000, 5000)
    kept, _ = admit_variants({v.key: v}, FilterThresholds(fs_pv=pv), 100, purity=background(5000, 5000), impure=True)
    assert list(kept) == [v.key]
