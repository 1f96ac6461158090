"""Render documentation service responses for the calling agent."""

import json
from typing import Any, Dict, List, Mapping

#: Number of ranked lines in a search summary.
SUMMARY_LIMIT = 5


def format_json_block(title: str, payload: Any) -> str:
    """Pretty-print ``payload`` as a fenced JSON block under ``title``."""
    body = json.dumps(payload, indent=2, ensure_ascii=False)
    return f"{title}\n```json\n{body}\n```"


def display_title(result: Mapping[str, Any]) -> str:
    """Pick the first non-empty of pageTitle, sectionTitle, sectionRoute."""
    for key in ("pageTitle", "sectionTitle", "sectionRoute"):
        value = result.get(key)
        if value:
            return str(value)
    return "(untitled)"


def _format_hit(rank: int, result: Mapping[str, Any]) -> str:
    line = f"{rank}. {display_title(result)} - {result.get('sectionRoute', '')}"
    score = result.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        line += f" (score: {score:.3f})"
    return line


def summarize_search_response(
    data: Mapping[str, Any], limit: int = SUMMARY_LIMIT
) -> str:
    """Summarise a search response as a header line plus the top hits.

    Results are shown in the order the service returned them.
    """
    results: List[Dict[str, Any]] = list(data.get("results") or [])
    query = data.get("query", "")
    if not results:
        return f'No matches for "{query}".'

    shown = results[:limit]
    total = data.get("total", len(results))
    took = data.get("took", 0)
    lines = [
        f'{total} result(s) for "{query}" (showing {len(shown)}, {took}ms).'
    ]
    lines.extend(_format_hit(i, hit) for i, hit in enumerate(shown, 1))
    return "\n".join(lines)
