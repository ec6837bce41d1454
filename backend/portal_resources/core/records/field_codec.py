"""
Compact single-cell encoding for the resource link list.

Format::

    Name1|URL1,Name2|URL2,Name3|URL3

The format has no escaping: a name or URL containing ``|`` or ``,`` does not
survive a round trip, and the affected piece is dropped on decode.
"""

import logging
from typing import Iterable, List

from ..models.resource_models import MAX_LINKS, LinkEntry

logger = logging.getLogger("portal_resources.field_codec")

ENTRY_SEPARATOR = ","
PAIR_SEPARATOR = "|"


def encode_links(links: Iterable[LinkEntry]) -> str:
    """
    Serialize up to ``MAX_LINKS`` entries into one cell value.

    Entries missing a name or URL are skipped; the limit is applied before
    skipping, matching how the list was always stored.
    """
    limited = list(links or [])[:MAX_LINKS]
    pairs = [
        f"{link.name.strip()}{PAIR_SEPARATOR}{link.url.strip()}"
        for link in limited
        if link.name and link.name.strip() and link.url and link.url.strip()
    ]
    return ENTRY_SEPARATOR.join(pairs)


def decode_links(cell: str) -> List[LinkEntry]:
    """Parse a stored cell back into link entries. Never raises."""
    if not cell or not str(cell).strip():
        return []

    links: List[LinkEntry] = []
    for piece in str(cell).split(ENTRY_SEPARATOR)[:MAX_LINKS]:
        parts = piece.strip().split(PAIR_SEPARATOR)
        if len(parts) != 2:
            logger.debug(f"Dropping unparsable link entry: {piece!r}")
            continue
        links.append(LinkEntry(name=parts[0].strip(), url=parts[1].strip()))
    return links
