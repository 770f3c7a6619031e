"""Format dispatch: pick the parser that recognizes an uploaded export."""

import json
import logging
from collections.abc import Callable
from typing import Any

from napoleon.importer.normalize import MAX_IMPORTED_CHATS, dedupe_chats, truncate_warnings
from napoleon.importer.parsers.chatgpt import parse_chatgpt_payload
from napoleon.importer.parsers.claude import parse_claude_payload
from napoleon.importer.parsers.gemini import parse_gemini_payload
from napoleon.importer.parsers.linear import parse_generic_payload
from napoleon.models import ChatImportResult

logger = logging.getLogger(__name__)

PayloadParser = Callable[[Any], ChatImportResult | None]

DEFAULT_PARSER_ORDER: tuple[PayloadParser, ...] = (
    parse_chatgpt_payload,
    parse_claude_payload,
    parse_gemini_payload,
    parse_generic_payload,
)

# Filename fragment -> parser tried first
_FILENAME_HINTS: tuple[tuple[tuple[str, ...], PayloadParser], ...] = (
    (("chatgpt", "conversations"), parse_chatgpt_payload),
    (("claude",), parse_claude_payload),
    (("gemini", "bard"), parse_gemini_payload),
)

UNRECOGNIZED_FORMAT_MESSAGE = (
    "Не удалось распознать формат. Поддерживаются ChatGPT, Claude, Gemini "
    "и JSON с массивом сообщений."
)


class ImportFormatError(Exception):
    """Raised when the import file is not JSON or no parser recognizes it."""


def load_json(raw: bytes | str) -> Any:
    """Decode raw file content as JSON."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportFormatError("Файл должен быть валидным JSON.") from e


def parser_order(filename: str | None) -> list[PayloadParser]:
    """Parsers in the order to try, honoring a producer hint in the filename."""
    lowered = (filename or "").lower()
    for fragments, preferred in _FILENAME_HINTS:
        if any(fragment in lowered for fragment in fragments):
            return [preferred, *(p for p in DEFAULT_PARSER_ORDER if p is not preferred)]
    return list(DEFAULT_PARSER_ORDER)


def parse_import_file(raw: bytes | str, filename: str | None = None) -> ChatImportResult:
    """Detect the export format and return deduplicated chats with warnings.

    Raises ImportFormatError for invalid JSON or when no parser produces at
    least one chat.
    """
    payload = load_json(raw)

    for parser in parser_order(filename):
        result = parser(payload)
        if result is None or not result.chats:
            continue

        chats, duplicates = dedupe_chats(result.chats)
        warnings = list(result.warnings)
        if duplicates:
            warnings.append(f"Удалено дублирующихся диалогов: {duplicates}.")

        logger.info(
            "Parsed %s export %r: %d chats, %d duplicates, %d warnings",
            result.source, filename, len(chats), duplicates, len(warnings),
        )
        return ChatImportResult(
            source=result.source,
            chats=chats[:MAX_IMPORTED_CHATS],
            warnings=truncate_warnings(warnings),
            duplicates=duplicates,
        )

    raise ImportFormatError(UNRECOGNIZED_FORMAT_MESSAGE)
