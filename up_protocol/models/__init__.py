"""Value types shared by the negotiation model and the HTTP adapters."""

from __future__ import annotations

from up_protocol.models.layer import LayerMode, MatchingLayer
from up_protocol.models.request_state import RequestState

__all__ = ["LayerMode", "MatchingLayer", "RequestState"]
