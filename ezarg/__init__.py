"""Ezarg: one query, answered side by side by several AI providers."""

from .content import Image, Mixed, Text, parse_content
from .dispatcher import DispatchSession, FanOutDispatcher, OutcomeUpdate
from .models import ChatTurn, Failure, Pending, ProviderId, QueryRequest, Success
from .render import render, render_outcome

__all__ = [
    "ChatTurn",
    "DispatchSession",
    "Failure",
    "FanOutDispatcher",
    "Image",
    "Mixed",
    "OutcomeUpdate",
    "Pending",
    "ProviderId",
    "QueryRequest",
    "Success",
    "Text",
    "parse_content",
    "render",
    "render_outcome",
]
