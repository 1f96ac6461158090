"""Static help document served by the ``help`` tool."""

import copy
from typing import Any, Dict, Mapping

SERVER_NAME = "pdfdancer-mcp"

HELP_DOCUMENT: Dict[str, Any] = {
    "title": "PDFDancer SDK Documentation",
    "version": "1.1",
    "overview": (
        "PDFDancer is an SDK for editing existing PDF documents: locate and "
        "change paragraphs, text lines, images, vector paths and form fields, "
        "then save the result. Client libraries exist for Python, TypeScript "
        "and Java. This server searches and retrieves the official SDK "
        "documentation so answers can quote it instead of guessing."
    ),
    "tools": [
        {
            "name": "help",
            "description": "Show this document.",
        },
        {
            "name": "version",
            "description": "Report the running pdfdancer-mcp version.",
        },
        {
            "name": "search-docs",
            "description": (
                "Keyword search over the documentation. Arguments: query "
                "(required), maxResults (1-10), tag, method (get|post)."
            ),
        },
        {
            "name": "get-docs",
            "description": (
                "Fetch the full markdown of one page by route, e.g. "
                "/docs/getting-started. Routes come from search-docs results."
            ),
        },
        {
            "name": "list-indexes",
            "description": "List the index tags that search-docs accepts as tag.",
        },
        {
            "name": "list-routes",
            "description": "List every stored documentation route.",
        },
        {
            "name": "service-info",
            "description": "Show metadata reported by the documentation service.",
        },
    ],
    "searchTips": [
        "Plain words match anywhere: authentication",
        "Require terms with +: +java +images",
        "Exclude terms with -: paragraph -form",
        "Prefix match with *: redact*",
        "Restrict to a field: title:fonts",
    ],
    "workflow": [
        "Call search-docs with a focused query.",
        "Pick the best sectionRoute from the results.",
        "Call get-docs with that route and answer from its content.",
    ],
}


def render_help(document: Mapping[str, Any] = HELP_DOCUMENT) -> str:
    """Render the help document as markdown."""
    lines = [
        f"# {document['title']} (v{document['version']})",
        "",
        document["overview"],
        "",
        "## Available MCP Tools",
    ]
    lines.extend(f"- `{tool['name']}`: {tool['description']}" for tool in document["tools"])
    lines.extend(["", "## Search Tips"])
    lines.extend(f"- {tip}" for tip in document["searchTips"])
    lines.extend(["", "## Typical Workflow"])
    lines.extend(f"{i}. {step}" for i, step in enumerate(document["workflow"], 1))
    return "\n".join(lines)


def help_payload() -> Dict[str, Any]:
    """Return a private copy of the help document for structured content."""
    return copy.deepcopy(HELP_DOCUMENT)


def version_text(version: str) -> str:
    return f"{SERVER_NAME} version: {version}"
