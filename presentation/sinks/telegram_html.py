"""
Telegram HTML helpers.

Telegram accepts only a small HTML subset: no <br>, no unclosed or stray
tags, and of the named entities only &lt; &gt; &amp; &quot;. These helpers
turn a reveal frame (possibly a prefix of a longer text) into something
Telegram will parse.
"""

import html as html_module
import re
from html.entities import html5
from typing import List

from domain.services.reveal_tokenizer import iter_reveal_units
from shared.constants import TELEGRAM_MESSAGE_LIMIT

_LINE_BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_PATTERN = re.compile(r"<(?P<closing>/?)(?P<name>[a-zA-Z][a-zA-Z0-9]*)\b[^<>]*>")
_ANY_TAG_PATTERN = re.compile(r"<[^>]+>")
_NAMED_ENTITY_PATTERN = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")

TELEGRAM_NAMED_ENTITIES = frozenset({"lt", "gt", "amp", "quot"})

# Tags that never need a closing counterpart
_VOID_TAGS = frozenset({"br", "hr", "img"})

# Room left for closing tags and the ellipsis when truncating
_TRUNCATE_RESERVE = 64


def _telegram_entity(match: re.Match) -> str:
    entity = match.group(0)
    if match.group(1) in TELEGRAM_NAMED_ENTITIES:
        return entity
    decoded = html5.get(entity[1:])
    if decoded is None:
        # Unknown name: show it literally
        return "&amp;" + entity[1:]
    return html_module.escape(decoded, quote=False)


def to_telegram_entities(text: str) -> str:
    """Replace named entities Telegram does not know (&nbsp;, &copy;, ...) with the characters they stand for"""
    return _NAMED_ENTITY_PATTERN.sub(_telegram_entity, text)


def balance_frame(markup: str) -> str:
    """
    Make one reveal frame well-formed.

    The frame is walked in reveal units, so tags are seen whole. An
    unterminated tag can only be the last unit and is dropped. A closing
    tag also closes everything opened inside it, a closing tag with no
    opener is dropped, and whatever is still open at the end is closed
    innermost first.
    """
    parts: List[str] = []
    stack: List[str] = []

    for unit in iter_reveal_units(markup):
        if not unit.is_tag:
            parts.append(unit.text)
            continue

        if not unit.text.endswith(">"):
            break

        match = _TAG_PATTERN.fullmatch(unit.text)
        if match is None:
            # "<" that does not start a tag
            parts.append(html_module.escape(unit.text, quote=False))
            continue

        name = match.group("name").lower()
        if name in _VOID_TAGS or unit.text.endswith("/>"):
            parts.append(unit.text)
        elif not match.group("closing"):
            stack.append(name)
            parts.append(unit.text)
        elif name in stack:
            while stack:
                open_name = stack.pop()
                parts.append(f"</{open_name}>")
                if open_name == name:
                    break

    parts.extend(f"</{name}>" for name in reversed(stack))
    return "".join(parts)


def undo_embedding_escapes(markup: str) -> str:
    """Reverse the backtick and </script> escaping meant for script embedding"""
    return markup.replace("<\\/script>", "&lt;/script&gt;").replace("\\`", "`")


def strip_html_tags(text: str) -> str:
    """Plain-text rendering of Telegram HTML"""
    return html_module.unescape(_ANY_TAG_PATTERN.sub("", text))


def markup_to_telegram_html(markup: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> str:
    """
    Convert revealed markup to Telegram HTML.

    Line breaks become newlines, entities are limited to the ones Telegram
    knows, tags are balanced and text beyond Telegram's message limit is
    cut off with an ellipsis.
    """
    text = _LINE_BREAK_PATTERN.sub("\n", undo_embedding_escapes(markup))
    text = to_telegram_entities(text)
    if len(text) > limit:
        text = text[:limit - _TRUNCATE_RESERVE]
        # Do not leave half an entity behind
        last_amp = text.rfind("&")
        if last_amp > text.rfind(";"):
            text = text[:last_amp]
        return balance_frame(text) + "…"
    return balance_frame(text)
