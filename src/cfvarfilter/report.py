from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Dict

from jinja2 import Template

from .models import FilterRun
from .plotting import plot_depth_hist, plot_removal_counts, plot_symmetry_scores, plot_vaf_hist
from .utils import ensure_outdir, write_json

logger = logging.getLogger(__name__)


_REPORT_TEMPLATE = Template(
    """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>cfvarfilter Report</title>
  <style>
    body { font-family: Arial, Helvetica, sans-serif; margin: 24px; }
    code, pre { background: #f6f8fa; padding: 2px 4px; border-radius: 4px; }
    h1, h2, h3 { margin-top: 1.2em; }
    table { border-collapse: collapse; margin-top: 0.6em; }
    th, td { border: 1px solid #ddd; padding: 8px; }
    th { background: #f2f2f2; text-align: left; }
    .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }
    .card { border: 1px solid #ddd; border-radius: 8px; padding: 12px; }
    .small { color: #666; font-size: 0.9em; }
    img { max-width: 100%; height: auto; border: 1px solid #eee; border-radius: 6px; }
  </style>
</head>
<body>

<h1>cfvarfilter Report</h1>
<p class="small">Generated: {{ generated_at }}</p>

<h2>Run summary</h2>
<div class="grid">
  <div class="card">
    <h3>Inputs</h3>
    <table>
      <tr><th>Tumor</th><td><code>{{ s.tumor_path }}</code></td></tr>
      {% for c in s.control_paths %}
      <tr><th>Control</th><td><code>{{ c }}</code></td></tr>
      {% endfor %}
      <tr><th>Output</th><td><code>{{ s.out_path }}</code></td></tr>
      <tr><th>Somatic mode</th><td>{{ s.somatic }}</td></tr>
      <tr><th>Impure mode</th><td>{{ s.impure }}</td></tr>
    </table>
  </div>
  <div class="card">
    <h3>Thresholds</h3>
    <table>
      <tr><th>dp_frac</th><td>{{ s.dp_frac }}</td></tr>
      <tr><th>Depth cutoff</th><td>{{ s.depth_cutoff if s.depth_cutoff is not none else "none" }}</td></tr>
      <tr><th>QUAL &ge;</th><td>{{ s.thresholds.qual }}</td></tr>
      <tr><th>FS &le;</th><td>{{ s.thresholds.fs }}</td></tr>
      <tr><th>QD &ge;</th><td>{{ s.thresholds.qd }}</td></tr>
      <tr><th>MQ &ge;</th><td>{{ s.thresholds.mq }}</td></tr>
      <tr><th>Fisher p-value &lt;</th><td>{{ s.thresholds.fs_pv }}</td></tr>
    </table>
  </div>
</div>

<h2>Purity</h2>
<table>
  <tr><th>Best offset x</th><td>{{ s.purity.offset if s.purity.offset is not none else "n/a" }}</td></tr>
  <tr><th>Purity (1 - 2x)</th><td>{{ s.purity.purity if s.purity.purity is not none else "n/a" }}</td></tr>
  <tr><th>Symmetry score</th><td>{{ s.purity.max_score }}</td></tr>
  <tr><th>Background ref reads</th><td>{{ s.purity.ref_total }}</td></tr>
  <tr><th>Background alt reads</th><td>{{ s.purity.alt_total }}</td></tr>
</table>

<h2>Variants</h2>
<table>
  {% for k, v in s.counts.items() %}
  <tr><th>{{ k }}</th><td>{{ v }}</td></tr>
  {% endfor %}
</table>

<h2>Plots</h2>
<div class="grid">
  <div class="card">
    <h3>Depth of coverage</h3>
    <img src="{{ plots.depth_hist }}" alt="depth histogram">
  </div>
  <div class="card">
    <h3>VAF histogram</h3>
    <img src="{{ plots.vaf_hist }}" alt="VAF histogram">
  </div>
</div>
<div class="grid" style="margin-top:16px;">
  <div class="card">
    <h3>Purity offset scan</h3>
    <img src="{{ plots.symmetry_scores }}" alt="symmetry scores">
  </div>
  <div class="card">
    <h3>Removals</h3>
    <img src="{{ plots.removal_counts }}" alt="removal counts">
  </div>
</div>

<h2>Interpretation notes</h2>
<ul>
  <li>The purity offset is reported only; admission uses the background read totals.</li>
  <li>Variants without AD/DP allele depths can never pass the depth requirement.</li>
</ul>

<hr>
<p class="small">cfvarfilter {{ version }}</p>
</body>
</html>"""
)


def write_plots(run: FilterRun, outdir: str | Path) -> Dict[str, str]:
    """Render run plots into ``outdir/plots`` and return paths relative to ``outdir``."""
    plots_dir = Path(outdir) / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)

    depth_png = plots_dir / "depth_hist.png"
    vaf_png = plots_dir / "vaf_hist.png"
    scores_png = plots_dir / "symmetry_scores.png"
    removal_png = plots_dir / "removal_counts.png"

    plot_depth_hist(depths=run.depths, depth_cutoff=run.depth_cutoff, out_png=depth_png)
    if run.purity is not None:
        plot_vaf_hist(histogram=run.purity.histogram, offset=run.purity.offset, out_png=vaf_png)
        plot_symmetry_scores(scores=run.purity.scores, out_png=scores_png)
    else:
        plot_vaf_hist(histogram={}, offset=None, out_png=vaf_png)
        plot_symmetry_scores(scores=[], out_png=scores_png)
    plot_removal_counts(counts=run.counts, out_png=removal_png)

    return {
        "depth_hist": str(Path("plots") / depth_png.name),
        "vaf_hist": str(Path("plots") / vaf_png.name),
        "symmetry_scores": str(Path("plots") / scores_png.name),
        "removal_counts": str(Path("plots") / removal_png.name),
    }


def render_report(*, outdir: str | Path, version: str, run: FilterRun) -> Path:
    """Write summary.json, plots and report.html for a finished run."""
    outdir = ensure_outdir(outdir)
    summary = run.to_summary()
    write_json(outdir / "summary.json", summary)
    plots = write_plots(run, outdir)

    if not summary["purity"]:
        summary["purity"] = {"offset": None, "purity": None, "max_score": 0, "ref_total": 0, "alt_total": 0}

    html = _REPORT_TEMPLATE.render(
        generated_at=_dt.datetime.now().isoformat(timespec="seconds"),
        version=version,
        s=summary,
        plots=plots,
    )

    out_path = outdir / "report.html"
    out_path.write_text(html, encoding="utf-8")
    logger.info("Report written: %s", out_path)
    return out_path
