"""Prompts for ranking several analysed pages against each other."""

from competitor_ui.models.analysis import ScoredAnalysis, FailedAnalysis

COMPARISON_SYSTEM_PROMPT = """You are a UI/UX strategist comparing competitor websites. You will receive a digest of individual page reviews (overall score, strengths, weaknesses). Rank the pages and explain the differences that matter most.

CRITICAL: Return ONLY valid JSON. No markdown fences, no comments, no text before or after the JSON object."""


def digest_line(analysis: ScoredAnalysis | FailedAnalysis) -> str:
    """One-line summary of an analysis for the comparison prompt."""
    if isinstance(analysis, ScoredAnalysis):
        score = analysis.overall_score if analysis.overall_score is not None else "?"
        strengths = ", ".join(analysis.strengths) or "none noted"
        weaknesses = ", ".join(analysis.weaknesses) or "none noted"
    else:
        score, strengths, weaknesses = "?", "unknown", "unknown"
    return (
        f"- {analysis.url}: overall {score}/5, "
        f"strengths: {strengths}, weaknesses: {weaknesses}"
    )


def build_comparison_prompt(analyses: list[ScoredAnalysis | FailedAnalysis]) -> str:
    """Build the user message for the comparison pass."""
    digest = "\n".join(digest_line(a) for a in analyses)
    return (
        f"## Page Reviews\n\n{digest}\n\n"
        f"## Output\n\n"
        f"Return exactly this JSON structure:\n\n"
        f"{{\n"
        f'  "winner": "URL of the strongest UI",\n'
        f'  "ranking": [{{"url": "...", "score": 4, "justification": "..."}}],\n'
        f'  "key_differences": ["..."],\n'
        f'  "recommendations": ["..."]\n'
        f"}}\n\n"
        f"Rank every URL listed above, best first."
    )
