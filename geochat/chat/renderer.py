"""
Message renderer.

Turns a stored message into a small block model (paragraphs, bullet lists,
emphasized spans, source links) and serializes that model to HTML. Model
text goes through a markdown subset; user text is shown verbatim.
"""

import html
import re
from typing import Annotated, Literal, Sequence

from pydantic import BaseModel, Field

from geochat.chat.constants import BULLET_MARKERS, GroundingKind, Role
from geochat.chat.schemas import Message, has_source

_BOLD_PATTERN = re.compile(r"(\*\*.*?\*\*)")

SOURCE_ICONS = {
    GroundingKind.WEB: "globe",
    GroundingKind.MAPS: "map-pin",
}


class Span(BaseModel):
    text: str
    emphasized: bool = False


class ParagraphBlock(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    spans: list[Span]
    preserve_whitespace: bool = False


class ListBlock(BaseModel):
    type: Literal["list"] = "list"
    items: list[list[Span]]


Block = Annotated[ParagraphBlock | ListBlock, Field(discriminator="type")]


class SourceLink(BaseModel):
    """One citation shown under a message."""

    kind: GroundingKind
    icon: str
    label: str
    uri: str | None = None


class RenderedMessage(BaseModel):
    id: str
    role: Role
    alignment: Literal["start", "end"]
    blocks: list[Block]
    sources: list[SourceLink] = Field(default_factory=list)


def parse_inline(text: str) -> list[Span]:
    """Split text into plain and ``**emphasized**`` spans."""
    spans = []
    for part in _BOLD_PATTERN.split(text):
        if not part:
            continue
        if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            inner = part[2:-2]
            if inner:
                spans.append(Span(text=inner, emphasized=True))
        else:
            spans.append(Span(text=part))
    return spans


def parse_markdown(text: str) -> list[ParagraphBlock | ListBlock]:
    """Line-oriented parse: bullet runs become one list, other lines paragraphs."""
    blocks: list[ParagraphBlock | ListBlock] = []
    list_items: list[list[Span]] = []

    def flush_list() -> None:
        if list_items:
            blocks.append(ListBlock(items=list(list_items)))
            list_items.clear()

    for line in text.split("\n"):
        trimmed = line.strip()
        if trimmed.startswith(BULLET_MARKERS):
            list_items.append(parse_inline(trimmed[2:]))
            continue
        flush_list()
        if trimmed:
            blocks.append(ParagraphBlock(spans=parse_inline(line)))

    flush_list()

    if not blocks:
        return [ParagraphBlock(spans=[Span(text=text)])]
    return blocks


def render_sources(message: Message) -> list[SourceLink]:
    links = []
    for chunk in message.grounding_chunks or ():
        if not has_source(chunk):
            continue
        kind = GroundingKind(chunk.kind)
        links.append(
            SourceLink(
                kind=kind,
                icon=SOURCE_ICONS[kind],
                label=chunk.title or chunk.uri,
                uri=chunk.uri,
            )
        )
    return links


def render_message(message: Message) -> RenderedMessage:
    if message.role == Role.MODEL:
        blocks = parse_markdown(message.text)
        alignment = "start"
    else:
        blocks = [ParagraphBlock(spans=[Span(text=message.text)], preserve_whitespace=True)]
        alignment = "end"

    return RenderedMessage(
        id=message.id,
        role=message.role,
        alignment=alignment,
        blocks=blocks,
        sources=render_sources(message),
    )


# ========== HTML ==========


def _spans_html(spans: Sequence[Span]) -> str:
    return "".join(
        f"<strong>{html.escape(span.text)}</strong>"
        if span.emphasized
        else html.escape(span.text)
        for span in spans
    )


def _block_html(block: ParagraphBlock | ListBlock) -> str:
    if isinstance(block, ListBlock):
        items = "".join(f"<li>{_spans_html(item)}</li>" for item in block.items)
        return f'<ul class="message-list">{items}</ul>'
    css_class = ' class="preserve-whitespace"' if block.preserve_whitespace else ""
    return f"<p{css_class}>{_spans_html(block.spans)}</p>"


def _source_html(source: SourceLink) -> str:
    icon = f'<span class="icon icon-{source.icon}" aria-hidden="true"></span>'
    label = f'<span class="source-title">{html.escape(source.label)}</span>'
    css_class = f"source source-{source.kind.value}"
    if source.uri:
        href = html.escape(source.uri, quote=True)
        return (
            f'<a class="{css_class}" href="{href}" target="_blank" '
            f'rel="noopener noreferrer">{icon}{label}</a>'
        )
    return f'<span class="{css_class}">{icon}{label}</span>'


def render_html(messages: Sequence[RenderedMessage]) -> str:
    """Serialize rendered messages into an HTML fragment, one bubble per message."""
    parts = []
    for message in messages:
        body = "".join(_block_html(block) for block in message.blocks)
        sources = ""
        if message.sources:
            links = "".join(_source_html(source) for source in message.sources)
            sources = f'<div class="sources"><h4>Sources</h4>{links}</div>'
        parts.append(
            f'<div class="message message-{message.role.value} align-{message.alignment}" '
            f'id="message-{html.escape(message.id, quote=True)}">'
            f'<div class="message-body">{body}</div>{sources}</div>'
        )
    return "\n".join(parts)
