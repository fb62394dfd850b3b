"""
archrv_tracker.chat_clients.markup

Telegram HTML markup helpers.

Responsibilities:
- Escape free text for `parse_mode=HTML`.
- Build bold/code fragments and user mention links.
- Split long texts into chunks the Bot API accepts.
"""

from __future__ import annotations

import html
import re

# Telegram rejects messages over 4096 characters; keep headroom for entities.
MESSAGE_LIMIT = 4000

# A tag, an entity, or one plain character.
_TOKEN = re.compile(r"<[^<>]*>|&#?\w+;|.", re.DOTALL)
_TAG = re.compile(r"<(/?)([A-Za-z]+)")


def escape(value: object) -> str:
    return html.escape(str(value), quote=False)


def bold(value: object) -> str:
    return f"<b>{escape(value)}</b>"


def code(value: object) -> str:
    return f"<code>{escape(value)}</code>"


def mention(tg_uid: int, name: str) -> str:
    return f'<a href="tg://user?id={tg_uid}">{escape(name)}</a>'


def split_text(text: str, limit: int = MESSAGE_LIMIT) -> list[str]:
    """
    Split `text` on line boundaries into chunks of at most `limit` characters.

    A single line longer than `limit` is cut between tags and entities; tags open
    at a cut are closed at the end of the chunk and reopened in the next one.
    """

    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current: list[str] = []
    size = 0
    for line in text.split("\n"):
        if len(line) > limit:
            if current:
                chunks.append("\n".join(current))
                current, size = [], 0
            *head, line = _cut_line(line, limit)
            chunks.extend(head)
        extra = len(line) + (1 if current else 0)
        if current and size + extra > limit:
            chunks.append("\n".join(current))
            current, size, extra = [], 0, len(line)
        current.append(line)
        size += extra
    if current:
        chunks.append("\n".join(current))
    return chunks


def _cut_line(line: str, limit: int) -> list[str]:
    chunks: list[str] = []
    stack: list[tuple[str, str]] = []  # (tag name, opening tag)
    current = ""
    body = 0  # index where this chunk's own content starts (after reopened tags)

    for token in _TOKEN.findall(line):
        after = _apply(stack, token)
        if len(current) > body and len(current) + len(token) + len(_closers(after)) > limit:
            chunks.append(current + _closers(stack))
            current = "".join(opening for _, opening in stack)
            body = len(current)
        current += token
        stack = after

    chunks.append(current)
    return chunks


def _apply(stack: list[tuple[str, str]], token: str) -> list[tuple[str, str]]:
    m = _TAG.match(token)
    if m is None:
        return stack
    closing, name = m.group(1), m.group(2).lower()
    if not closing:
        return [*stack, (name, token)]
    if stack and stack[-1][0] == name:
        return stack[:-1]
    return stack


def _closers(stack: list[tuple[str, str]]) -> str:
    return "".join(f"</{name}>" for name, _ in reversed(stack))
