"""HTML report generator: produces a single self-contained benchmarking report.

Everything shown here can come from third-party pages (titles, descriptions)
or from the model, so every interpolated value goes through ``_esc``.
"""

from __future__ import annotations

import base64
import html
import logging
from pathlib import Path
from typing import Any, Iterable

from competitor_ui.models.analysis import (
    Analysis,
    ComparisonResult,
    FailedAnalysis,
    ScoredAnalysis,
)
from competitor_ui.models.capture import CaptureFailure
from competitor_ui.models.preset import Preset

logger = logging.getLogger(__name__)


def _esc(value: Any) -> str:
    """The single escaping point for text placed in the document."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def _embed_image(path: str) -> str:
    """Read an image file and return a base64 data URI, or empty string on failure."""
    try:
        p = Path(path)
        if not p.exists() or p.stat().st_size == 0:
            return ""
        data = base64.b64encode(p.read_bytes()).decode()
    except OSError as e:
        logger.debug("Could not embed %s: %s", path, e)
        return ""
    suffix = p.suffix.lower()
    mime = "image/png" if suffix == ".png" else "image/jpeg" if suffix in (".jpg", ".jpeg") else "image/webp"
    return f"data:{mime};base64,{data}"


def _score_class(score: int | None) -> str:
    return f"score-{score}" if score in (1, 2, 3, 4, 5) else "score-none"


def _list_section(title: str, items: list[str]) -> str:
    if not items:
        return ""
    lis = "".join(f"<li>{_esc(i)}</li>" for i in items)
    return f'<div class="list-section"><h3>{_esc(title)}</h3><ul>{lis}</ul></div>'


def _viewport_badge(viewport: str) -> str:
    kind = "mobile" if viewport == "mobile" else "desktop"
    return f'<span class="badge badge-{kind}">{_esc(viewport)}</span>'


def _build_screenshot(analysis: Analysis) -> str:
    data_uri = _embed_image(analysis.screenshots.fold)
    if not data_uri:
        return ""
    return f'''
      <div class="screenshot-container">
        <img class="screenshot-img" src="{data_uri}" alt="Screenshot of {_esc(analysis.url)}" onclick="this.classList.toggle('zoomed')"/>
        <div class="screenshot-label">First view &middot; {_esc(analysis.viewport)}</div>
      </div>'''


def _build_dimensions(analysis: ScoredAnalysis, dimension_names: dict[str, str]) -> str:
    if not analysis.dimensions:
        return ""
    items = ""
    for dim_id, dim in analysis.dimensions.items():
        name = dimension_names.get(dim_id, dim_id)
        highlights = ""
        if dim.highlights:
            highlights = '<ul class="dim-highlights">' + "".join(
                f"<li>{_esc(h)}</li>" for h in dim.highlights
            ) + "</ul>"
        items += f'''
        <div class="dim-item">
          <div class="dim-name">{_esc(name)} <span class="dim-score">{dim.score}/5</span></div>
          <div class="dim-score-bar"><div class="dim-score-fill fill-{dim.score}"></div></div>
          <div class="dim-findings">{_esc(dim.findings)}</div>
          {highlights}
        </div>'''
    return f'<div class="dim-grid">{items}</div>'


def _build_analysis_card(analysis: Analysis, dimension_names: dict[str, str]) -> str:
    """Build the HTML card for one analysed (URL, viewport) pair."""
    score = analysis.overall_score if isinstance(analysis, ScoredAnalysis) else None
    title = analysis.metadata.title or analysis.url

    if isinstance(analysis, FailedAnalysis):
        body = (
            '<div class="notice notice-warn"><strong>Analysis unavailable</strong> '
            '&mdash; screenshot only.'
            f'<div class="notice-detail">{_esc(analysis.error)}</div></div>'
        )
        body += _build_screenshot(analysis)
        card_class = "card analysis-card analysis-error"
    else:
        body = f'<div class="summary-text">{_esc(analysis.summary)}</div>'
        body += _build_screenshot(analysis)
        body += _build_dimensions(analysis, dimension_names)
        body += _list_section("Strengths", analysis.strengths)
        body += _list_section("Weaknesses", analysis.weaknesses)
        body += _list_section("Unique Patterns", analysis.unique_patterns)
        card_class = "card analysis-card"

    return f'''
  <div class="{card_class}">
    <div class="card-title">
      <div class="score-circle {_score_class(score)}">{score if score is not None else "&ndash;"}</div>
      <div>
        <div>{_esc(title)}</div>
        <div class="card-subtitle">{_esc(analysis.url)} {_viewport_badge(analysis.viewport)}</div>
      </div>
    </div>
    {body}
  </div>'''


def _build_capture_failure_card(failure: CaptureFailure) -> str:
    return f'''
  <div class="card capture-failure-card">
    <div class="card-title">
      <div class="score-circle score-none">&ndash;</div>
      <div>
        <div>{_esc(failure.url)}</div>
        <div class="card-subtitle">{_viewport_badge(failure.viewport)}</div>
      </div>
    </div>
    <div class="notice notice-error"><strong>Capture failed</strong> &mdash; no screenshot or analysis.
      <div class="notice-detail">{_esc(failure.error)}</div></div>
  </div>'''


def _build_comparison_section(comparison: ComparisonResult | None) -> str:
    if comparison is None:
        return ""
    ranking = ""
    for i, entry in enumerate(comparison.ranking, 1):
        score = f"{entry.score:g}/5" if entry.score is not None else ""
        ranking += f'''
    <div class="ranking-item">
      <div class="rank-num">#{i}</div>
      <div>
        <div class="rank-url">{_esc(entry.url)} <span class="rank-score">{score}</span></div>
        <div class="rank-reason">{_esc(entry.justification)}</div>
      </div>
    </div>'''
    winner = ""
    if comparison.winner:
        winner = f'<p class="winner">Winner: <strong>{_esc(comparison.winner)}</strong></p>'
    return f'''
  <div class="card comparison-card">
    <div class="card-title comparison-title">Comparison Analysis</div>
    {winner}
    {ranking}
    {_list_section("Key Differences", comparison.key_differences)}
    {_list_section("Recommendations", comparison.recommendations)}
  </div>'''


def render_report_html(
    analyses: list[Analysis],
    comparison: ComparisonResult | None,
    run_id: str,
    timestamp: str,
    preset: Preset | None = None,
    capture_failures: Iterable[CaptureFailure] = (),
) -> str:
    """Render the full report document. Pure: reads screenshots, writes nothing."""
    dimension_names = {d.id: d.name for d in preset.dimensions} if preset else {}
    preset_name = preset.name if preset else "default"
    failures = list(capture_failures)

    cards = [_build_analysis_card(a, dimension_names) for a in analyses]
    cards += [_build_capture_failure_card(f) for f in failures]
    scored = sum(1 for a in analyses if isinstance(a, ScoredAnalysis))

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Competitor UI Report &mdash; {_esc(timestamp[:10])}</title>
<style>
  :root {{ --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; --accent: #6366f1; --warn: #f59e0b; --fail: #ef4444; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Noto Sans JP', sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1100px; margin: 0 auto; }}
  h1 {{ font-size: 1.8rem; margin-bottom: 0.3rem; }}
  .meta {{ color: var(--muted); margin-bottom: 1.5rem; font-size: 0.9rem; }}
  .card {{ background: var(--card); border-radius: 8px; padding: 1.4rem; margin-bottom: 1.2rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); }}
  .card-title {{ display: flex; align-items: center; gap: 0.8rem; font-size: 1.1rem; font-weight: 700; margin-bottom: 1rem; }}
  .card-subtitle {{ font-size: 0.8rem; color: var(--muted); font-weight: 400; }}
  .badge {{ display: inline-block; padding: 0.1rem 0.55rem; border-radius: 9999px; font-size: 0.7rem; font-weight: 600; text-transform: uppercase; }}
  .badge-desktop {{ background: #dbeafe; color: #1e40af; }}
  .badge-mobile {{ background: #f3e8ff; color: #6b21a8; }}
  .score-circle {{ width: 48px; height: 48px; border-radius: 50%; display: flex; align-items: center; justify-content: center; font-size: 1.3rem; font-weight: 800; color: white; flex-shrink: 0; }}
  .score-1 {{ background: #f43f5e; }} .score-2 {{ background: #e77c5a; }} .score-3 {{ background: #f59e0b; }}
  .score-4 {{ background: #6dd5a0; }} .score-5 {{ background: #10b981; }} .score-none {{ background: #94a3b8; }}
  .summary-text {{ font-size: 0.95rem; margin-bottom: 1rem; }}
  .notice {{ border-radius: 6px; padding: 0.6rem 0.8rem; margin-bottom: 0.8rem; font-size: 0.88rem; }}
  .notice-warn {{ background: #fffbeb; border: 1px solid #fde68a; color: #92400e; }}
  .notice-error {{ background: #fef2f2; border: 1px solid #fecaca; color: #991b1b; }}
  .notice-detail {{ font-size: 0.8rem; margin-top: 0.2rem; opacity: 0.85; word-break: break-word; }}
  .dim-grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(280px, 1fr)); gap: 0.8rem; margin-bottom: 1rem; }}
  .dim-item {{ background: #f1f5f9; border-radius: 6px; padding: 0.8rem; }}
  .dim-name {{ font-weight: 600; font-size: 0.88rem; margin-bottom: 0.3rem; }}
  .dim-score {{ color: var(--muted); font-weight: 400; }}
  .dim-score-bar {{ height: 6px; border-radius: 3px; background: var(--border); margin-bottom: 0.4rem; overflow: hidden; }}
  .dim-score-fill {{ height: 100%; border-radius: 3px; }}
  .fill-1 {{ background: #f43f5e; width: 20%; }} .fill-2 {{ background: #e77c5a; width: 40%; }} .fill-3 {{ background: #f59e0b; width: 60%; }}
  .fill-4 {{ background: #6dd5a0; width: 80%; }} .fill-5 {{ background: #10b981; width: 100%; }}
  .dim-findings {{ font-size: 0.82rem; color: var(--muted); }}
  .dim-highlights {{ margin: 0.3rem 0 0 1rem; font-size: 0.8rem; }}
  .list-section {{ margin-bottom: 0.8rem; }}
  .list-section h3 {{ font-size: 0.85rem; color: var(--accent); text-transform: uppercase; letter-spacing: 0.05em; margin-bottom: 0.3rem; }}
  .list-section ul {{ margin-left: 1.2rem; font-size: 0.88rem; }}
  .screenshot-container {{ margin: 1rem 0; }}
  .screenshot-img {{ max-width: 100%; border-radius: 6px; border: 1px solid var(--border); cursor: pointer; }}
  .screenshot-img.zoomed {{ position: fixed; top: 5%; left: 5%; width: 90%; height: 90%; object-fit: contain; z-index: 1000; background: rgba(0,0,0,0.85); border: none; padding: 1rem; }}
  .screenshot-label {{ font-size: 0.75rem; color: var(--muted); margin-top: 0.2rem; }}
  .comparison-card {{ border-left: 4px solid var(--accent); }}
  .comparison-title {{ color: var(--accent); }}
  .winner {{ margin-bottom: 0.6rem; }}
  .ranking-item {{ display: flex; align-items: center; gap: 0.8rem; padding: 0.5rem 0; border-bottom: 1px solid #f1f5f9; }}
  .rank-num {{ font-size: 1.3rem; font-weight: 800; color: var(--accent); width: 2.2rem; text-align: center; }}
  .rank-url {{ font-weight: 600; font-size: 0.9rem; }}
  .rank-score {{ color: var(--warn); font-weight: 400; }}
  .rank-reason {{ font-size: 0.82rem; color: var(--muted); }}
  .footer {{ text-align: center; font-size: 0.78rem; color: var(--muted); margin-top: 2rem; padding-top: 1rem; border-top: 1px solid var(--border); }}
</style>
</head>
<body>
<div class="container">
  <h1>Competitor UI Report</h1>
  <p class="meta">{_esc(timestamp[:10])} &middot; Preset: {_esc(preset_name)} &middot; {scored}/{len(analyses) + len(failures)} pages analyzed</p>

  {_build_comparison_section(comparison)}
  {"".join(cards)}

  <div class="footer">Generated {_esc(timestamp)} &middot; Report ID: {_esc(run_id)}</div>
</div>
</body>
</html>'''
