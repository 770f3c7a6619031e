"""Tests for the share payload normalizer."""

import pytest

from napoleon.share.payload import ShareContentMissingError, normalize_share_payload
from tests.fixtures import (
    make_chatgpt_conversation,
    make_claude_conversation,
    make_gemini_contents,
)


class TestDirectFields:
    def test_plain_text(self):
        result = normalize_share_payload({"text": "  Заметка  "})
        assert result.content == "Заметка"
        assert result.source == "manual"
        assert result.title is None

    def test_aliases_on_root(self):
        result = normalize_share_payload({
            "message": "hello",
            "subject": "Greeting",
            "link": "https://example.test/x",
            "username": "ann",
            "platform": "GPT",
        })
        assert result.title == "Greeting"
        assert result.url == "https://example.test/x"
        assert result.author == "ann"
        assert result.source == "chatgpt"

    def test_explicit_source_beats_structural_hints(self):
        """A ChatGPT mapping and URL do not override a declared non-default source."""
        result = normalize_share_payload({
            "source": "kimi",
            "mapping": make_chatgpt_conversation()["mapping"],
            "url": "https://chatgpt.com/x",
        })
        assert result.source == "kimi"
        assert "Пользователь: What is Python?" in result.content
        assert "chatgpt" not in result.tags

    def test_nested_payload_object(self):
        result = normalize_share_payload({"payload": {"content": "inside", "title": "T", "source": "claude"}})
        assert result.content == "inside"
        assert result.title == "T"
        assert result.source == "claude"

    def test_body_key_holding_the_payload_is_not_content(self):
        result = normalize_share_payload({"body": {"text": "real text"}})
        assert result.content == "real text"

    def test_url_only_gets_placeholder_content(self):
        result = normalize_share_payload({"url": "https://claude.ai/chat/123"})
        assert result.content == "Ссылка: https://claude.ai/chat/123"
        assert result.source == "claude"
        assert "ссылка" in result.tags

    def test_nothing_usable_raises(self):
        with pytest.raises(ShareContentMissingError):
            normalize_share_payload({"title": "only a title"})
        with pytest.raises(ShareContentMissingError):
            normalize_share_payload(["not", "an", "object"])


class TestTags:
    def test_explicit_tags_first_then_inferred(self):
        result = normalize_share_payload({"text": "срочно", "tags": "мой, второй"})
        assert result.tags[:2] == ["мой", "второй"]
        assert "важно" in result.tags

    def test_payload_tags_used_when_root_has_none(self):
        result = normalize_share_payload({"data": {"text": "hi", "tags": ["x"]}})
        assert result.tags[0] == "x"


class TestTranscripts:
    def test_chatgpt_mapping(self):
        result = normalize_share_payload({"conversation": make_chatgpt_conversation()})
        assert result.source == "chatgpt"
        assert result.content.startswith("Система: You are a helpful assistant.")
        assert "Пользователь: What is Python?" in result.content
        assert "Ассистент: Python is a programming language." in result.content
        assert result.title == "Test Conversation"

    def test_claude_chat_messages(self):
        result = normalize_share_payload(make_claude_conversation())
        assert result.source == "claude"
        assert result.content.split("\n\n")[:2] == ["Пользователь: Hello!", "Ассистент: Hi there!"]

    def test_gemini_contents(self):
        result = normalize_share_payload({"contents": make_gemini_contents()})
        assert result.source == "gemini"
        assert result.content == "Пользователь: Name a prime number.\n\nАссистент: Seven."

    def test_unknown_role_label(self):
        result = normalize_share_payload({"messages": ["loose line"]})
        assert result.content == "Сообщение: loose line"

    def test_transcript_line_cap(self):
        messages = [{"role": "user", "content": f"line {i}"} for i in range(60)]
        result = normalize_share_payload({"messages": messages})
        assert len(result.content.split("\n\n")) == 40
