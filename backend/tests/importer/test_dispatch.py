"""Tests for export format detection and batch-level cleanup."""

import pytest

from napoleon.importer.normalize import MAX_IMPORTED_CHATS
from napoleon.importer.parsers.chatgpt import parse_chatgpt_payload
from napoleon.importer.parsers.claude import parse_claude_payload
from napoleon.importer.parsers.detection import (
    DEFAULT_PARSER_ORDER,
    UNRECOGNIZED_FORMAT_MESSAGE,
    ImportFormatError,
    parse_import_file,
    parser_order,
)
from tests.fixtures import (
    GENERIC_MESSAGES,
    chatgpt_node,
    chatgpt_structural_node,
    make_chatgpt_conversation,
    make_claude_conversation,
    make_gemini_contents,
    to_bytes,
)


def _distinct_chatgpt_conversation(n: int) -> dict:
    mapping = {
        "root": chatgpt_structural_node("root", None, ["u"]),
        "u": chatgpt_node("u", "root", ["a"], role="user", content=f"question {n}"),
        "a": chatgpt_node("a", "u", [], role="assistant", content=f"answer {n}"),
    }
    return make_chatgpt_conversation(conv_id=f"c{n}", title=f"Chat {n}", mapping=mapping, current_node="a")


class TestParserOrder:
    def test_default_order(self):
        assert parser_order(None) == list(DEFAULT_PARSER_ORDER)
        assert parser_order("export.json") == list(DEFAULT_PARSER_ORDER)

    def test_filename_hint_moves_parser_first(self):
        order = parser_order("Claude-Export.JSON")
        assert order[0] is parse_claude_payload
        assert len(order) == len(DEFAULT_PARSER_ORDER)

    def test_conversations_json_prefers_chatgpt(self):
        assert parser_order("conversations.json")[0] is parse_chatgpt_payload


class TestParseImportFile:
    def test_detects_chatgpt(self):
        result = parse_import_file(to_bytes([make_chatgpt_conversation()]), "export.json")
        assert result.source == "chatgpt"

    def test_chat_messages_means_claude(self):
        payload = {"conversations": [make_claude_conversation()]}
        result = parse_import_file(to_bytes(payload), "export.json")
        assert result.source == "claude"

    def test_claude_wins_even_with_gemini_hint(self):
        result = parse_import_file(to_bytes([make_claude_conversation()]), "gemini.json")
        assert result.source == "claude"

    def test_detects_gemini(self):
        result = parse_import_file(to_bytes({"contents": make_gemini_contents()}), "takeout.json")
        assert result.source == "gemini"

    def test_generic_fallback(self):
        result = parse_import_file(to_bytes(GENERIC_MESSAGES), "messages.json")
        assert result.source == "generic"
        assert len(result.chats) == 1

    def test_accepts_text_content(self):
        result = parse_import_file('[{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}]')
        assert result.source == "generic"

    def test_invalid_json(self):
        with pytest.raises(ImportFormatError, match="валидным JSON"):
            parse_import_file(b"{not json", "broken.json")

    def test_unrecognized_shape(self):
        with pytest.raises(ImportFormatError) as exc_info:
            parse_import_file(to_bytes({"hello": "world"}), "x.json")
        assert str(exc_info.value) == UNRECOGNIZED_FORMAT_MESSAGE

    def test_empty_array_is_unrecognized(self):
        with pytest.raises(ImportFormatError):
            parse_import_file(b"[]", "x.json")

    def test_duplicate_conversations_counted(self):
        """The same conversation twice in one file is imported once."""
        conversation = make_chatgpt_conversation()
        result = parse_import_file(to_bytes([conversation, conversation]), "conversations.json")
        assert len(result.chats) == 1
        assert result.duplicates == 1
        assert "Удалено дублирующихся диалогов: 1." in result.warnings

    def test_chat_count_is_capped(self):
        payload = [_distinct_chatgpt_conversation(n) for n in range(MAX_IMPORTED_CHATS + 10)]
        result = parse_import_file(to_bytes(payload), "conversations.json")
        assert len(result.chats) == MAX_IMPORTED_CHATS
        assert result.duplicates == 0
