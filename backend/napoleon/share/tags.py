"""Source normalization, tag merging and keyword tag inference for the inbox."""

import re
from typing import Any

from napoleon.utils.json import as_array

DEFAULT_SHARE_SOURCE = "manual"
MAX_SHARE_TAGS = 8
MAX_TITLE_LENGTH = 140
DERIVED_TITLE_LENGTH = 72
UNTITLED_ITEM = "Shared item"
LINK_TAG = "ссылка"

SOURCE_ALIASES = {
    "gpt": "chatgpt",
    "chat-gpt": "chatgpt",
    "gpt-4": "chatgpt",
    "gpt4": "chatgpt",
    "openai": "chatgpt",
    "chatgpt": "chatgpt",
    "claudeai": "claude",
    "claude.ai": "claude",
    "anthropic": "claude",
    "claude": "claude",
    "bard": "gemini",
    "google-gemini": "gemini",
    "google": "gemini",
    "gemini": "gemini",
    "moonshot": "kimi",
    "moonshotai": "kimi",
    "kimi": "kimi",
    "minimaxai": "minimax",
    "minimax": "minimax",
}

# (tag, pattern) in output order
_KEYWORD_TAGS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("важно", re.compile(r"важно|срочно|critical|urgent|asap|приоритет", re.IGNORECASE)),
    ("задача", re.compile(r"задач|todo|сделать|надо|нужно|план|roadmap|этап", re.IGNORECASE)),
    ("идея", re.compile(r"идея|гипотез|концепт|вариант|brainstorm", re.IGNORECASE)),
    ("код", re.compile(r"код|bug|fix|api|deploy|build|рефактор|ошибк|ts|js|next", re.IGNORECASE)),
    ("контент", re.compile(r"контент|пост|статья|канал|twitter|youtube|video|reel|shorts", re.IGNORECASE)),
    ("бизнес", re.compile(r"продаж|лид|клиент|бизнес|выручк|прибыл|маржин", re.IGNORECASE)),
)

_WHITESPACE = re.compile(r"\s+")


def normalize_share_source(value: Any) -> str:
    """Lower-case and resolve aliases. Missing or blank sources are "manual"."""
    if not isinstance(value, str):
        return DEFAULT_SHARE_SOURCE
    normalized = value.strip().lower()
    if not normalized:
        return DEFAULT_SHARE_SOURCE
    return SOURCE_ALIASES.get(normalized, normalized)


def normalize_share_tags(value: Any) -> list[str]:
    """Trimmed, unique, insertion-ordered string tags, at most MAX_SHARE_TAGS."""
    tags: list[str] = []
    for item in as_array(value):
        if not isinstance(item, str):
            continue
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:MAX_SHARE_TAGS]


def parse_tags(value: Any) -> list[str]:
    """Tags from a list or a comma-separated string."""
    if isinstance(value, str):
        return normalize_share_tags(value.split(","))
    return normalize_share_tags(value)


def merge_share_tags(*groups: list[str] | None) -> list[str]:
    merged: list[str] = []
    for group in groups:
        if group:
            merged.extend(group)
    return normalize_share_tags(merged)


def infer_share_tags(
    *,
    source: str,
    content: str,
    title: str | None = None,
    url: str | None = None,
) -> list[str]:
    """Structural and keyword tags for an item. Pure and idempotent."""
    normalized_source = normalize_share_source(source)
    text = f"{title or ''}\n{content}".lower()
    tags: list[str] = []

    if normalized_source != DEFAULT_SHARE_SOURCE:
        tags.append(normalized_source)
    if url:
        tags.append(LINK_TAG)

    for tag, pattern in _KEYWORD_TAGS:
        if pattern.search(text):
            tags.append(tag)

    return merge_share_tags(tags)


def derive_share_title(title: str | None, content: str) -> str:
    """Explicit title (capped), else the start of the content on one line."""
    clean_title = title.strip() if isinstance(title, str) else ""
    if clean_title:
        return clean_title[:MAX_TITLE_LENGTH]

    single_line = _WHITESPACE.sub(" ", content).strip()
    if not single_line:
        return UNTITLED_ITEM
    if len(single_line) <= DERIVED_TITLE_LENGTH:
        return single_line
    return f"{single_line[:DERIVED_TITLE_LENGTH]}…"
