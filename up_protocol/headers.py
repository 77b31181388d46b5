"""Canonical Unpoly header names.

Single source of truth for every wire header the protocol reads or writes.
Other modules import these constants instead of spelling header names
inline; ``HEADER_NAMES`` maps each protocol concept to its wire name.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Request headers sent by the Unpoly client
VERSION = "X-Up-Version"
CONTEXT = "X-Up-Context"
FAIL_CONTEXT = "X-Up-Fail-Context"
TARGET = "X-Up-Target"
FAIL_TARGET = "X-Up-Fail-Target"
MODE = "X-Up-Mode"
FAIL_MODE = "X-Up-Fail-Mode"
VALIDATE = "X-Up-Validate"

# Response headers written by the server
TITLE = "X-Up-Title"
LOCATION = "X-Up-Location"
ACCEPT_LAYER = "X-Up-Accept-Layer"
DISMISS_LAYER = "X-Up-Dismiss-Layer"
METHOD = "X-Up-Method"
EVICT_CACHE = "X-Up-Evict-Cache"
EXPIRE_CACHE = "X-Up-Expire-Cache"
EVENTS = "X-Up-Events"
VARY = "Vary"

HEADER_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "version": VERSION,
        "context": CONTEXT,
        "fail-context": FAIL_CONTEXT,
        "target": TARGET,
        "fail-target": FAIL_TARGET,
        "mode": MODE,
        "fail-mode": FAIL_MODE,
        "validate": VALIDATE,
        "title": TITLE,
        "location": LOCATION,
        "accept-layer": ACCEPT_LAYER,
        "dismiss-layer": DISMISS_LAYER,
        "method": METHOD,
        "evict-cache": EVICT_CACHE,
        "expire-cache": EXPIRE_CACHE,
        "events": EVENTS,
        "vary": VARY,
    }
)

REQUEST_HEADERS: tuple[str, ...] = (
    VERSION,
    CONTEXT,
    FAIL_CONTEXT,
    TARGET,
    FAIL_TARGET,
    MODE,
    FAIL_MODE,
    VALIDATE,
)

# Response headers a browser client must be allowed to read (CORS)
RESPONSE_HEADERS: tuple[str, ...] = (
    TITLE,
    LOCATION,
    ACCEPT_LAYER,
    DISMISS_LAYER,
    CONTEXT,
    TARGET,
    METHOD,
    EVICT_CACHE,
    EXPIRE_CACHE,
    EVENTS,
)


__all__ = [
    "VERSION",
    "CONTEXT",
    "FAIL_CONTEXT",
    "TARGET",
    "FAIL_TARGET",
    "MODE",
    "FAIL_MODE",
    "VALIDATE",
    "TITLE",
    "LOCATION",
    "ACCEPT_LAYER",
    "DISMISS_LAYER",
    "METHOD",
    "EVICT_CACHE",
    "EXPIRE_CACHE",
    "EVENTS",
    "VARY",
    "HEADER_NAMES",
    "REQUEST_HEADERS",
    "RESPONSE_HEADERS",
]
