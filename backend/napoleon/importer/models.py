"""Intermediate representation for imported conversations.

All parsers produce ParsedConversation/ParsedMessage, which the normalizer
turns into canonical Chat records. This decouples format-specific parsing
from cleanup and deduplication.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ParsedMessage:
    """A single message recovered from an export."""

    role: str  # "user" | "assistant" | "system"
    content: str
    timestamp: datetime


@dataclass
class ParsedConversation:
    """A complete parsed conversation, ready for normalization."""

    title: str
    created_at: datetime
    updated_at: datetime
    messages: list[ParsedMessage] = field(default_factory=list)
