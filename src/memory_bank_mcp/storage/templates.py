"""Bootstrap catalog: the well-known memory bank documents and their templates.

Templates are written only when the memory bank directory itself is created.
Each template contains a single ``YYYY-MM-DD HH:MM:SS`` placeholder which is
replaced with the creation time.
"""

from __future__ import annotations

from typing import Optional

# Placeholder substituted with the creation timestamp.
TIMESTAMP_PLACEHOLDER = "YYYY-MM-DD HH:MM:SS"

BOOTSTRAP_CATALOG: dict[str, str] = {
    "productContext.md": (
        "# Product Context\n"
        "\n"
        "This file provides a high-level overview of the project and the "
        "expected product that will be created. It is based on the project "
        "brief and any other available project-related information.\n"
        "YYYY-MM-DD HH:MM:SS - Log of updates made will be appended as "
        "footnotes to the end of this file.\n"
        "\n"
        "*\n"
        "\n"
        "## Project Goal\n"
        "\n"
        "*\n"
        "\n"
        "## Key Features\n"
        "\n"
        "*\n"
        "\n"
        "## Overall Architecture\n"
        "\n"
        "*\n"
    ),
    "activeContext.md": (
        "# Active Context\n"
        "\n"
        "This file tracks the project's current status, including recent "
        "changes, current goals, and open questions.\n"
        "YYYY-MM-DD HH:MM:SS - Log of updates made.\n"
        "\n"
        "*\n"
        "\n"
        "## Current Focus\n"
        "\n"
        "*\n"
        "\n"
        "## Recent Changes\n"
        "\n"
        "*\n"
        "\n"
        "## Open Questions/Issues\n"
        "\n"
        "*\n"
    ),
    "progress.md": (
        "# Progress\n"
        "\n"
        "This file tracks the project's progress using a task list format.\n"
        "YYYY-MM-DD HH:MM:SS - Log of updates made.\n"
        "\n"
        "*\n"
        "\n"
        "## Completed Tasks\n"
        "\n"
        "*\n"
        "\n"
        "## Current Tasks\n"
        "\n"
        "*\n"
        "\n"
        "## Next Steps\n"
        "\n"
        "*\n"
    ),
    "decisionLog.md": (
        "# Decision Log\n"
        "\n"
        "This file records architectural and implementation decisions using "
        "a list format.\n"
        "YYYY-MM-DD HH:MM:SS - Log of updates made.\n"
        "\n"
        "*\n"
        "\n"
        "## Decision\n"
        "\n"
        "*\n"
        "\n"
        "## Rationale\n"
        "\n"
        "*\n"
        "\n"
        "## Implementation Details\n"
        "\n"
        "*\n"
    ),
    "systemPatterns.md": (
        "# System Patterns *Optional*\n"
        "\n"
        "This file documents recurring patterns and standards used in the "
        "project. It is optional, but recommended to be updated as the "
        "project evolves.\n"
        "YYYY-MM-DD HH:MM:SS - Log of updates made.\n"
        "\n"
        "*\n"
        "\n"
        "## Coding Patterns\n"
        "\n"
        "*\n"
        "\n"
        "## Architectural Patterns\n"
        "\n"
        "*\n"
        "\n"
        "## Testing Patterns\n"
        "\n"
        "*\n"
    ),
}


def render_template(file_name: str, timestamp: str) -> Optional[str]:
    """Return the catalog template for *file_name* with its timestamp filled in.

    Returns *None* when *file_name* is not part of the bootstrap catalog.
    """
    template = BOOTSTRAP_CATALOG.get(file_name)
    if template is None:
        return None
    return template.replace(TIMESTAMP_PLACEHOLDER, timestamp, 1)
