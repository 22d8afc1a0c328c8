from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .coverage import DEFAULT_DP_FRAC
from .germline import split_control_paths
from .models import FilterThresholds
from .pipeline import run_variant_filtering
from .records import DEFAULT_FMT_COL, DEFAULT_INFO_COL
from .report import render_report
from .toy_data import make_toy_data
from .utils import VariantFileError

_DEFAULTS = FilterThresholds()


def _setup_logging(verbosity: int, *, logfile: Optional[Path] = None) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)

    if logfile is not None:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile)
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(log_fmt))
        logging.getLogger().addHandler(fh)


def _handle_error(err: Exception, *, log_path: Optional[Path] = None) -> int:
    if isinstance(err, VariantFileError):
        msg = f"Error: {err}"
    else:
        msg = f"{err.__class__.__name__}: {err}"

    sys.stderr.write(msg + "\n")
    if log_path is not None:
        sys.stderr.write(f"See log: {log_path}\n")
    return 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cfvarfilter",
        description=(
            "cfvarfilter: filter tumor (e.g. cfDNA) variant calls by quality, depth of coverage, "
            "optional purity adjustment and optional germline exclusion."
        ),
    )
    p.add_argument("--version", action="version", version=f"cfvarfilter {__version__}")

    sub = p.add_subparsers(dest="cmd")

    # -----------------
    # quickstart
    # -----------------
    sub.add_parser(
        "quickstart",
        help="Print ready-to-run recipes for common scenarios.",
    )

    # -----------------
    # make-toy-data
    # -----------------
    t = sub.add_parser(
        "make-toy-data",
        help="Generate a tiny tumor VCF and control VCF for demos/tests.",
    )
    t.add_argument("--outdir", required=True, help="Output directory for toy data.")
    t.add_argument("--seed", type=int, default=7, help="Random seed for allele choice.")

    # -----------------
    # filter
    # -----------------
    f = sub.add_parser(
        "filter",
        help="Filter tumor variant calls and write the surviving records.",
        description="Perform the cfDNA variant filtering pipeline.",
    )
    f.add_argument("--tumor", default=None, help="VCF file with the variants called from the tumor sample.")
    f.add_argument(
        "--control",
        default=None,
        help='VCF file(s) with the variants called from control samples; multiple files separated by ":".',
    )
    f.add_argument("--out", default=None, help="Output file receiving the surviving records.")
    f.add_argument("--somatic", action="store_true", help="Only output somatic mutations (needs --control).")
    f.add_argument(
        "--impure",
        action="store_true",
        help="Assume the sample is impure and apply the Fisher's exact test purity filter.",
    )
    f.add_argument(
        "--dp_frac",
        type=float,
        default=DEFAULT_DP_FRAC,
        help=f"Fraction of depth of coverage mass to be filtered (default: {DEFAULT_DP_FRAC}).",
    )
    f.add_argument(
        "--fs_pv",
        type=float,
        default=_DEFAULTS.fs_pv,
        help=f"Fisher's exact test p-value for filtering impure variants (default: {_DEFAULTS.fs_pv}).",
    )
    f.add_argument(
        "--info_col",
        type=int,
        default=DEFAULT_INFO_COL,
        help=f'0-based INFO column, looks like "AC=1;AF=0.500;AN=2;" (default: {DEFAULT_INFO_COL}).',
    )
    f.add_argument(
        "--fmt_col",
        type=int,
        default=DEFAULT_FMT_COL,
        help=f'0-based FORMAT column, looks like "GT:AD:DP:GQ:PL" (default: {DEFAULT_FMT_COL}).',
    )
    f.add_argument("--QUAL", dest="qual", type=float, default=_DEFAULTS.qual, help="Minimum QUAL (default: 1500).")
    f.add_argument("--FS", dest="fs", type=float, default=_DEFAULTS.fs, help="Maximum FS (default: 70).")
    f.add_argument("--QD", dest="qd", type=float, default=_DEFAULTS.qd, help="Minimum QD (default: 0.8).")
    f.add_argument("--MQ", dest="mq", type=float, default=_DEFAULTS.mq, help="Minimum MQ (default: 40).")
    f.add_argument(
        "--report-dir",
        default=None,
        help="Optional directory for summary.json, plots and report.html.",
    )
    f.add_argument("--progress", action="store_true", help="Show a progress bar while reading the tumor file.")
    f.add_argument("--log-file", default=None, help="Optional log file (in addition to stderr).")
    f.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")
    f.set_defaults(subparser=f)

    return p


# -----------------
# Command handlers
# -----------------

def cmd_quickstart() -> int:
    lines = [
        "cfvarfilter quickstart (copy/paste):",
        "",
        "1) High-confidence calls from a tumor VCF:",
        "   cfvarfilter filter \\",
        "     --tumor tumor.vcf \\",
        "     --out filtered.vcf",
        "",
        "2) Somatic-only calls (drop anything seen in the control VCFs):",
        "   cfvarfilter filter \\",
        "     --tumor cfdna.vcf \\",
        "     --control normal.vcf:pon.vcf.gz \\",
        "     --somatic --out somatic.vcf",
        "",
        "3) Impure sample with a run report:",
        "   cfvarfilter filter \\",
        "     --tumor cfdna.vcf --impure --fs_pv 0.01 \\",
        "     --out filtered.vcf --report-dir report/",
        "   Outputs: report/report.html, report/summary.json",
        "",
        "Tip: cfvarfilter make-toy-data --outdir toy/ writes inputs to try these on.",
    ]
    print("\n".join(lines))
    return 0


def cmd_make_toy_data(args: argparse.Namespace) -> int:
    try:
        summary = make_toy_data(outdir=Path(args.outdir).expanduser().resolve(), seed=int(args.seed))
    except Exception as e:
        return _handle_error(e)
    print(json.dumps(summary, indent=2))
    return 0


def cmd_filter(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if not args.tumor or args.out is None:
        parser.print_help()
        return 0

    log_path = Path(args.log_file).expanduser().resolve() if args.log_file else None
    _setup_logging(args.verbose, logfile=log_path)

    logger = logging.getLogger("cfvarfilter")
    logger.info("cfvarfilter %s", __version__)

    control_paths = split_control_paths(args.control)
    if args.somatic and not control_paths:
        parser.print_usage(sys.stderr)
        sys.stderr.write("error: --somatic requires --control FILE[:FILE...]\n")
        return 2

    thresholds = FilterThresholds(
        qual=float(args.qual),
        fs=float(args.fs),
        qd=float(args.qd),
        mq=float(args.mq),
        fs_pv=float(args.fs_pv),
    )

    try:
        run = run_variant_filtering(
            args.tumor,
            args.out,
            control=control_paths,
            info_col=int(args.info_col),
            fmt_col=int(args.fmt_col),
            somatic=bool(args.somatic),
            impure=bool(args.impure),
            dp_frac=float(args.dp_frac),
            thresholds=thresholds,
            progress=bool(args.progress),
        )

        if args.report_dir:
            report_path = render_report(
                outdir=Path(args.report_dir).expanduser().resolve(),
                version=__version__,
                run=run,
            )
            print(str(report_path))
        return 0
    except Exception as e:
        return _handle_error(e, log_path=log_path)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd is None:
        parser.print_help()
        return 0
    if args.cmd == "quickstart":
        return cmd_quickstart()
    if args.cmd == "make-toy-data":
        return cmd_make_toy_data(args)
    if args.cmd == "filter":
        return cmd_filter(args, args.subparser)

    parser.error(f"Unknown command: {args.cmd}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
