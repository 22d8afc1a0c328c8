import subprocess
import sys


def test_cli_help() -> None:
    cp = subprocess.run(
        [sys.executable, "-m", "cfvarfilter", "--help"],
        check=True,
        capture_output=True,
        text=True,
    )
    assert "cfvarfilter" in cp.stdout.lower()


def test_filter_help() -> None:
    cp = subprocess.run(
        [sys.executable, "-m", "cfvarfilter", "filter", "--help"],
        check=True,
        capture_output=True,
        text=True,
    )
    for opt in ["--tumor", "--control", "--somatic", "--impure", "--dp_frac", "--fs_pv", "--QUAL", "--MQ", "--out"]:
        assert opt in cp.stdout
