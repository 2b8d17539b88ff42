"""
Turn normalized answers into display segments.

Rendering is a pure function of its input: no UI state is read or mutated,
and the same content always renders to the same segments.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Union

from .content import Image, Mixed, ResponseContent, Text, format_text
from .models import Failure, Pending, ProviderOutcome, Success

DEFAULT_ALT = "AI generated content"
LOADING = "Loading..."


@dataclass(frozen=True)
class TextSegment:
    text: str

    def as_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ImageSegment:
    src: str
    alt: str = DEFAULT_ALT

    def as_dict(self) -> Dict[str, Any]:
        return {"type": "image", "src": self.src, "alt": self.alt}


DisplaySegment = Union[TextSegment, ImageSegment]


def _render_image(image: Image) -> ImageSegment:
    return ImageSegment(image.source.uri, image.alt or DEFAULT_ALT)


def render(content: ResponseContent) -> List[DisplaySegment]:
    """
    Render content into ordered display segments.

    Text is formatted for display (bullets, stripped emphasis); images
    resolve to a data URI or their direct URL.
    """
    if isinstance(content, Text):
        return [TextSegment(format_text(content.text))]
    if isinstance(content, Image):
        return [_render_image(content)]
    if isinstance(content, Mixed):
        segments: List[DisplaySegment] = []
        for segment in content.segments:
            if isinstance(segment, Image):
                segments.append(_render_image(segment))
            else:
                segments.append(TextSegment(format_text(segment.text)))
        return segments
    raise TypeError(f"Cannot render {type(content).__name__}")


def render_outcome(outcome: ProviderOutcome) -> List[DisplaySegment]:
    """Render one provider's slot, including the pending and error states."""
    if isinstance(outcome, Pending):
        return [TextSegment(LOADING)]
    if isinstance(outcome, Failure):
        return [TextSegment(f"Error: {outcome.display}")]
    if isinstance(outcome, Success):
        return render(outcome.content)
    raise TypeError(f"Cannot render {type(outcome).__name__}")


def segments_as_dicts(segments: List[DisplaySegment]) -> List[Dict[str, Any]]:
    return [segment.as_dict() for segment in segments]
