"""Writes a rendered Unpoly header map onto an outgoing response.

``Vary`` is merged with whatever the response already varies on; every other
header overwrites an existing value of the same name.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from starlette.responses import Response

from up_protocol import headers
from up_protocol.logic.negotiation import Unpoly

logger = logging.getLogger(__name__)


def merge_vary(existing: Optional[str], added: Iterable[str]) -> str:
    """Existing tokens first, then new ones; de-duplicated case-insensitively."""
    merged: List[str] = []
    seen = set()
    for token in [t.strip() for t in str(existing or "").split(",")] + list(added):
        if token and token.lower() not in seen:
            seen.add(token.lower())
            merged.append(token)
    return ",".join(merged)


def emit_unpoly_headers(response: Response, unpoly: Unpoly) -> Dict[str, str]:
    """Render ``unpoly`` and set the headers on ``response``; returns the rendered map."""
    rendered = unpoly.get_headers()
    for name, value in rendered.items():
        if name == headers.VARY:
            value = merge_vary(response.headers.get(headers.VARY), value.split(","))
        response.headers[name] = value
    logger.debug("up.headers.emit", extra={"header_names": list(rendered)})
    return rendered


__all__ = ["emit_unpoly_headers", "merge_vary"]
