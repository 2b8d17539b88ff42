"""Anthropic/Claude adapter."""

from typing import Any, Dict

from ..config import ANTHROPIC_VERSION, CLAUDE_API_URL, CLAUDE_MAX_TOKENS, CLAUDE_MODEL
from ..content import ResponseContent, parse_content, simplify
from ..models import ProviderId, QueryRequest
from .base import ProviderAdapter


class ClaudeAdapter(ProviderAdapter):
    """
    Claude messages API.

    Messages carry content blocks rather than bare strings, the request
    needs a `max_tokens` ceiling, and the key travels in `x-api-key` next
    to a pinned `anthropic-version`.
    """

    provider_id = ProviderId.CLAUDE
    endpoint = CLAUDE_API_URL
    default_model = CLAUDE_MODEL

    def __init__(self, *args, max_tokens: int = CLAUDE_MAX_TOKENS, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_tokens = max_tokens

    def build_payload(self, request: QueryRequest) -> Dict[str, Any]:
        messages = [
            {
                'role': turn.role,
                'content': [{'type': 'text', 'text': turn.text}]
            }
            for turn in request.turns()
        ]
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }

    def build_headers(self, credential: str) -> Dict[str, str]:
        return {
            "x-api-key": credential,
            "Content-Type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def extract_content(self, data: Dict[str, Any]) -> ResponseContent:
        # Response content is an array of content blocks
        blocks = data.get('content')
        if not isinstance(blocks, list):
            raise self.malformed("response has no 'content' blocks")

        return simplify(parse_content(blocks))
