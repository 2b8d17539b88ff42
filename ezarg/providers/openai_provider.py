"""OpenAI-compatible chat-completions adapters (ChatGPT, Grok, Perplexity)."""

from typing import Any, Dict

from ..config import (
    GROK_API_URL, GROK_MODEL, OPENAI_API_URL, OPENAI_MODEL,
    PERPLEXITY_API_URL, PERPLEXITY_MODEL,
)
from ..content import ResponseContent, parse_content, simplify
from ..models import ProviderId, QueryRequest
from .base import ProviderAdapter


class ChatCompletionsAdapter(ProviderAdapter):
    """Any API speaking the OpenAI chat-completions schema with a bearer key."""

    def build_payload(self, request: QueryRequest) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {'role': turn.role, 'content': turn.text}
                for turn in request.turns()
            ],
        }

    def build_headers(self, credential: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }

    def extract_content(self, data: Dict[str, Any]) -> ResponseContent:
        try:
            message = data['choices'][0]['message']
            answer = message['content']
        except (KeyError, IndexError, TypeError):
            raise self.malformed("response has no 'choices[0].message.content'") from None

        if answer is None:
            raise self.malformed("response message has no content")
        if not isinstance(answer, (str, list)):
            raise self.malformed(
                f"unexpected message content type {type(answer).__name__}"
            )

        if isinstance(answer, list):
            return simplify(parse_content(answer))
        return parse_content(answer)


class ChatGPTAdapter(ChatCompletionsAdapter):
    provider_id = ProviderId.CHATGPT
    endpoint = OPENAI_API_URL
    default_model = OPENAI_MODEL


class GrokAdapter(ChatCompletionsAdapter):
    provider_id = ProviderId.GROK
    endpoint = GROK_API_URL
    default_model = GROK_MODEL


class PerplexityAdapter(ChatCompletionsAdapter):
    provider_id = ProviderId.PERPLEXITY
    endpoint = PERPLEXITY_API_URL
    default_model = PERPLEXITY_MODEL
