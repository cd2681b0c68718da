"""Prompts for scoring a single page against a preset."""

from competitor_ui.models.capture import PageMetadata
from competitor_ui.models.preset import Preset

ANALYSIS_SYSTEM_PROMPT = """You are a senior UI/UX reviewer benchmarking competitor websites. You will receive a screenshot of the first viewport of a page (the content visible without scrolling) and a rubric of weighted evaluation dimensions.

Judge only what is visible in the screenshot. Be specific: name the elements you are talking about.

CRITICAL: Return ONLY valid JSON. No markdown fences, no comments, no text before or after the JSON object.

Scoring scale for every score: integer 1-5
1 = poor, 2 = below average, 3 = average, 4 = good, 5 = excellent"""


def format_dimensions(preset: Preset) -> str:
    """Render every rubric dimension as a markdown block."""
    blocks = []
    for d in preset.dimensions:
        criteria = "\n".join(f"- {c}" for c in d.criteria) or "- (no explicit criteria)"
        blocks.append(
            f"### {d.name} (id: {d.id}, weight: {d.weight})\n"
            f"{d.description}\n"
            f"Criteria:\n{criteria}"
        )
    return "\n\n".join(blocks)


def build_analysis_prompt(preset: Preset, metadata: PageMetadata, url: str) -> str:
    """Build the user message for scoring one captured page."""
    dimension_entries = ",\n    ".join(
        f'"{d.id}": {{"score": 3, "findings": "...", "highlights": ["..."]}}'
        for d in preset.dimensions
    )
    return (
        f"## Page\n\n"
        f"- Title: {metadata.title or '(unknown)'}\n"
        f"- URL: {url}\n\n"
        f"## Rubric: {preset.name} v{preset.version}\n\n"
        f"{format_dimensions(preset)}\n\n"
        f"## Output\n\n"
        f"Return exactly this JSON structure:\n\n"
        f"{{\n"
        f'  "summary": "At most three sentences summarizing the page",\n'
        f'  "overall_score": 3,\n'
        f'  "dimensions": {{\n    {dimension_entries}\n  }},\n'
        f'  "strengths": ["..."],\n'
        f'  "weaknesses": ["..."],\n'
        f'  "unique_patterns": ["UI patterns this page uses that competitors typically do not"]\n'
        f"}}\n\n"
        f"Score every dimension listed above, using its id as the key."
    )
