"""Tests for source normalization, tag merging and keyword inference."""

from napoleon.share.tags import (
    MAX_SHARE_TAGS,
    derive_share_title,
    infer_share_tags,
    merge_share_tags,
    normalize_share_source,
    normalize_share_tags,
    parse_tags,
)


class TestNormalizeShareSource:
    def test_aliases(self):
        assert normalize_share_source("GPT-4") == "chatgpt"
        assert normalize_share_source(" Claude.AI ") == "claude"
        assert normalize_share_source("bard") == "gemini"
        assert normalize_share_source("moonshot") == "kimi"

    def test_unknown_source_lowercased(self):
        assert normalize_share_source("Telegram") == "telegram"

    def test_missing_is_manual(self):
        assert normalize_share_source(None) == "manual"
        assert normalize_share_source("   ") == "manual"
        assert normalize_share_source(42) == "manual"


class TestTagLists:
    def test_trim_dedupe_and_cap(self):
        raw = [" a ", "a", "", 3, *[f"t{i}" for i in range(20)]]
        tags = normalize_share_tags(raw)
        assert tags[0] == "a"
        assert len(tags) == MAX_SHARE_TAGS
        assert len(set(tags)) == len(tags)

    def test_non_list_is_empty(self):
        assert normalize_share_tags("a,b") == []

    def test_parse_comma_string(self):
        assert parse_tags("идея, код,,идея") == ["идея", "код"]

    def test_merge_keeps_first_occurrence_order(self):
        assert merge_share_tags(["x", "y"], None, ["y", "z"]) == ["x", "y", "z"]


class TestInferShareTags:
    def test_urgent_bug_report(self):
        tags = infer_share_tags(source="manual", content="Срочно нужно пофиксить баг в API")
        assert "важно" in tags
        assert "код" in tags

    def test_source_and_link_tags_come_first(self):
        tags = infer_share_tags(source="openai", content="идея для канала", url="https://x.test")
        assert tags[:2] == ["chatgpt", "ссылка"]
        assert "идея" in tags
        assert "контент" in tags

    def test_manual_source_not_a_tag(self):
        assert "manual" not in infer_share_tags(source="manual", content="привет")

    def test_title_is_scanned(self):
        assert "бизнес" in infer_share_tags(source="manual", content="см. ниже", title="План продаж")

    def test_idempotent(self):
        kwargs = {"source": "claude", "content": "Надо сделать пост про выручку", "title": "Roadmap"}
        first = infer_share_tags(**kwargs)
        assert infer_share_tags(**kwargs) == first
        assert merge_share_tags(first, infer_share_tags(**kwargs)) == first


class TestDeriveShareTitle:
    def test_explicit_title_capped(self):
        assert derive_share_title("  Hi  ", "body") == "Hi"
        assert len(derive_share_title("x" * 200, "body")) == 140

    def test_from_content_single_line(self):
        assert derive_share_title(None, "first line\nsecond   line") == "first line second line"

    def test_long_content_truncated_with_ellipsis(self):
        title = derive_share_title("", "w" * 100)
        assert title == "w" * 72 + "…"

    def test_empty_content_placeholder(self):
        assert derive_share_title(None, "   ") == "Shared item"
