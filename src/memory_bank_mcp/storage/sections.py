"""Entry formatting and the section-aware splice.

Everything here is pure string manipulation; the store is responsible for
reading the body and writing the result back.

A section starts at the first occurrence of its header text anywhere in the
body (exact substring match, not a full-line match) and runs until the next
``\\n##`` or the end of the body.  A header that happens to be a substring of
some other line will match that line.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

# Rendering used for entry timestamps and template placeholders.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marker for the start of the next second-level (or deeper) header.
NEXT_SECTION_MARKER = "\n##"


def current_timestamp(clock: Optional[Callable[[], datetime]] = None) -> str:
    """Render the current local time as ``YYYY-MM-DD HH:MM:SS``."""
    now = clock() if clock is not None else datetime.now()
    return now.strftime(TIMESTAMP_FORMAT)


def format_entry(entry: str, timestamp: str) -> str:
    """Return the on-disk rendering of a single entry."""
    return f"\n[{timestamp}] - {entry}\n"


def find_section_end(body: str, header: str) -> Optional[int]:
    """Return the index where a new entry for *header* should be inserted.

    Returns *None* when *header* does not occur in *body*.
    """
    header_index = body.find(header)
    if header_index == -1:
        return None
    next_header = body.find(NEXT_SECTION_MARKER, header_index + len(header))
    if next_header == -1:
        return len(body)
    return next_header


def insert_under_section(body: str, header: str, formatted_entry: str) -> str:
    """Return *body* with *formatted_entry* added to the section *header*.

    When the header is present the entry is spliced in just before the next
    section, with trailing whitespace of the section collapsed to a single
    newline.  When it is absent, the header and the entry are appended to the
    end of the body.
    """
    insert_at = find_section_end(body, header)
    if insert_at is None:
        return body + f"\n{header}\n{formatted_entry}"
    return (
        body[:insert_at].rstrip()
        + "\n"
        + formatted_entry.lstrip()
        + body[insert_at:]
    )
