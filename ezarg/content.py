"""
Provider-agnostic answer model.

Every provider answer is normalized into one of three shapes:

- Text: a plain string
- Image: a single image, either inline base64 data or a URL
- Mixed: an ordered sequence of Text and Image segments

Providers disagree on how they hand back images, so `parse_content` accepts
structured content blocks (Claude-style and OpenAI-style) as well as plain
text, recovering markdown images of the form ![alt](url) from the latter.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

# ![alt](url)
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")

_BULLET_PATTERN = re.compile(r"^[ \t]*[*\-][ \t]+(.+)$", re.MULTILINE)
_BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")

BULLET = "•"


@dataclass(frozen=True)
class Base64Source:
    """Inline image bytes, base64 encoded."""
    media_type: str
    data: str
    kind: str = "base64"

    @property
    def uri(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


@dataclass(frozen=True)
class UrlSource:
    """Image reachable at a direct URL."""
    url: str
    kind: str = "url"

    @property
    def uri(self) -> str:
        return self.url


ImageSource = Union[Base64Source, UrlSource]


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Image:
    source: ImageSource
    alt: str = ""


Segment = Union[Text, Image]


@dataclass(frozen=True)
class Mixed:
    segments: Tuple[Segment, ...]


ResponseContent = Union[Text, Image, Mixed]


def is_image_descriptor(value: Any) -> bool:
    """Check whether a raw value describes a single image."""
    if not isinstance(value, dict):
        return False
    return value.get("type") in ("image", "image_url")


def image_from_descriptor(block: Dict[str, Any]) -> Optional[Image]:
    """
    Build an Image from a structured image block.

    Handles the shapes providers actually send:
    - {"type": "image", "source": {"type": "base64", "media_type": ..., "data": ...}}
    - {"type": "image", "source": {"type": "url", "url": ...}}
    - {"type": "image", "url": ...}
    - {"type": "image_url", "image_url": {"url": ...}}

    Returns:
        The Image, or None if the block carries no usable source
    """
    alt = block.get("alt") or ""
    source = block.get("source")
    if isinstance(source, dict):
        if source.get("type") == "base64" and source.get("data"):
            return Image(
                Base64Source(source.get("media_type") or "image/png", source["data"]),
                alt,
            )
        if source.get("url"):
            return Image(UrlSource(source["url"]), alt)

    image_url = block.get("image_url")
    if isinstance(image_url, dict) and image_url.get("url"):
        return Image(UrlSource(image_url["url"]), alt)
    if isinstance(image_url, str) and image_url:
        return Image(UrlSource(image_url), alt)

    if block.get("url"):
        return Image(UrlSource(block["url"]), alt)
    return None


def _segment_from_block(block: Any) -> Optional[Segment]:
    if isinstance(block, (Text, Image)):
        return block
    if isinstance(block, str):
        return Text(block)
    if not isinstance(block, dict):
        return None

    kind = block.get("type")
    if kind == "text":
        text = block.get("text")
        if text is None:
            text = block.get("content")
        return Text(text) if isinstance(text, str) else None
    if kind in ("image", "image_url"):
        return image_from_descriptor(block)
    return None


def parse_text(text: str) -> ResponseContent:
    """
    Split plain text at inline markdown images.

    Args:
        text: Answer text, possibly containing ![alt](url) references

    Returns:
        Text when no image reference is present, otherwise a Mixed sequence
        with the text before, between and after each image
    """
    matches = list(IMAGE_PATTERN.finditer(text))
    if not matches:
        return Text(text)

    segments: List[Segment] = []
    last_index = 0
    for match in matches:
        if match.start() > last_index:
            segments.append(Text(text[last_index:match.start()]))
        segments.append(Image(UrlSource(match.group(2)), match.group(1)))
        last_index = match.end()

    if last_index < len(text):
        segments.append(Text(text[last_index:]))

    return Mixed(tuple(segments))


def parse_content(raw: Any) -> ResponseContent:
    """
    Classify a raw answer value into the normalized content model.

    Args:
        raw: An already-normalized value, an image descriptor, a list of
            content blocks, or a plain string

    Returns:
        The normalized ResponseContent

    Raises:
        ValueError: If the value has none of the supported shapes
    """
    if isinstance(raw, (Text, Image, Mixed)):
        return raw

    if is_image_descriptor(raw):
        image = image_from_descriptor(raw)
        if image is None:
            raise ValueError("image block has no source")
        return image

    if isinstance(raw, (list, tuple)):
        segments = []
        for block in raw:
            segment = _segment_from_block(block)
            # Unknown block kinds are dropped.
            if segment is None:
                continue
            if isinstance(segment, Text) and not segment.text:
                continue
            segments.append(segment)
        return Mixed(tuple(segments))

    if isinstance(raw, str):
        return parse_text(raw)

    raise ValueError(f"unsupported answer shape: {type(raw).__name__}")


def simplify(content: ResponseContent) -> ResponseContent:
    """
    Tidy a block-list answer.

    Inline markdown images in every text segment are split out, an answer
    with no usable segments becomes empty Text, and a single segment is
    returned on its own.
    """
    if not isinstance(content, Mixed):
        return content

    segments: List[Segment] = []
    for segment in content.segments:
        recovered = parse_text(segment.text) if isinstance(segment, Text) else segment
        if isinstance(recovered, Mixed):
            segments.extend(recovered.segments)
        else:
            segments.append(recovered)

    if not segments:
        return Text("")
    if len(segments) == 1:
        return segments[0]
    return Mixed(tuple(segments))


def _format_once(text: str) -> str:
    text = _BOLD_PATTERN.sub(r"\1", text)
    return _BULLET_PATTERN.sub(BULLET + r" \1", text)


def format_text(text: str) -> str:
    """
    Apply display formatting to answer text.

    Lines starting with * or - become bullet lines, **bold** markers are
    stripped, and blank lines are left alone. The stored text is never
    touched; this only produces the string to display.
    """
    formatted = _format_once(text)
    while formatted != text:
        text, formatted = formatted, _format_once(formatted)
    return formatted


def plain_text(content: ResponseContent) -> str:
    """Flatten content back to text for conversation history."""
    if isinstance(content, Text):
        return content.text
    if isinstance(content, Image):
        return f"![{content.alt}]({content.source.uri})"
    return "".join(plain_text(segment) for segment in content.segments)
