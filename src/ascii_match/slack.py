"""Slack Block Kit payloads for slash-command responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from ascii_match.search.models import IndexableDocument


NOT_FOUND_TEXT = "couldnt find anything.... try something else or help me to add more ascii art"


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(exclude_none=True, exclude_defaults=True)


class Text(_Payload):
    type: str
    text: str


class Element(_Payload):
    type: str
    style: str | None = None
    url: str | None = None
    value: str | None = None
    action_id: str | None = None
    text: Text | None = None


class Block(_Payload):
    type: str
    text: Text | None = None
    block_id: str | None = None
    elements: list[Element] | None = None


class SlackResponse(_Payload):
    response_type: str | None = None
    replace_original: bool = False
    delete_original: bool = False
    blocks: list[Block] | None = None


def code_block(text: str) -> Block:
    return Block(type="section", text=Text(type="mrkdwn", text=f"```\n{text}\n```"))


def art_text(doc: IndexableDocument) -> str:
    """Art body of any indexed document: its ``blob`` values joined by newlines."""
    return "\n".join(doc.indexable_fields().get("blob", ()))


def art_blocks(doc: IndexableDocument) -> list[Block]:
    return [code_block(art_text(doc).strip("\n"))]


def art_buttons(doc: IndexableDocument, query: str) -> Block:
    """Action row letting the user post the art or ask for another one."""
    return Block(
        type="actions",
        block_id="action_123",
        elements=[
            Element(
                type="button",
                text=Text(type="plain_text", text="Post it!"),
                style="primary",
                value=f"{doc.doc_id}/{query}",
                action_id="post_it",
            ),
            Element(
                type="button",
                text=Text(type="plain_text", text="Shuffle!"),
                action_id="shuffle",
                value=query,
            ),
        ],
    )


def art_response(doc: IndexableDocument, query: str, *, with_buttons: bool = False) -> SlackResponse:
    blocks = art_blocks(doc)
    if with_buttons:
        blocks.append(art_buttons(doc, query))
    return SlackResponse(response_type="in_channel", blocks=blocks)


def not_found_response() -> SlackResponse:
    return SlackResponse(blocks=[code_block(NOT_FOUND_TEXT)])
