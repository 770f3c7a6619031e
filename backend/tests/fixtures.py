"""Shared test helpers: export builders for each supported producer."""

import json
from typing import Any


# ---------------------------------------------------------------------------
# ChatGPT
# ---------------------------------------------------------------------------

def chatgpt_node(
    node_id: str,
    parent: str | None,
    children: list[str],
    role: str = "user",
    content: str = "Hello",
    create_time: float | None = 1700000000.0,
) -> dict:
    """Build a single ChatGPT mapping node."""
    return {
        "id": node_id,
        "message": {
            "id": f"msg-{node_id}",
            "author": {"role": role},
            "create_time": create_time,
            "content": {"content_type": "text", "parts": [content]},
            "metadata": {},
        },
        "parent": parent,
        "children": children,
    }


def chatgpt_structural_node(node_id: str, parent: str | None, children: list[str]) -> dict:
    """Build a structural ChatGPT node (message=null)."""
    return {"id": node_id, "message": None, "parent": parent, "children": children}


def make_chatgpt_conversation(
    *,
    conv_id: str = "conv-1",
    title: str = "Test Conversation",
    mapping: dict | None = None,
    current_node: str | None = "a2",
) -> dict:
    """Linear ChatGPT conversation: system, then two user/assistant turns."""
    if mapping is None:
        mapping = {
            "root": chatgpt_structural_node("root", None, ["sys"]),
            "sys": chatgpt_node("sys", "root", ["u1"], role="system",
                                content="You are a helpful assistant.", create_time=1700000000.0),
            "u1": chatgpt_node("u1", "sys", ["a1"], role="user",
                               content="What is Python?", create_time=1700000010.0),
            "a1": chatgpt_node("a1", "u1", ["u2"], role="assistant",
                               content="Python is a programming language.", create_time=1700000020.0),
            "u2": chatgpt_node("u2", "a1", ["a2"], role="user",
                               content="Tell me more.", create_time=1700000030.0),
            "a2": chatgpt_node("a2", "u2", [], role="assistant",
                               content="It was created by Guido van Rossum.", create_time=1700000040.0),
        }
    conversation = {
        "id": conv_id,
        "title": title,
        "create_time": 1700000000.0,
        "update_time": 1700001000.0,
        "mapping": mapping,
    }
    if current_node is not None:
        conversation["current_node"] = current_node
    return conversation


def make_chatgpt_branching_conversation(current_node: str = "c") -> dict:
    """Root A with two answers B and B'; C continues B."""
    mapping = {
        "root": chatgpt_structural_node("root", None, ["a"]),
        "a": chatgpt_node("a", "root", ["b", "b2"], role="user",
                          content="A", create_time=1700000010.0),
        "b": chatgpt_node("b", "a", ["c"], role="assistant",
                          content="B", create_time=1700000020.0),
        "b2": chatgpt_node("b2", "a", [], role="assistant",
                           content="B prime", create_time=1700000025.0),
        "c": chatgpt_node("c", "b", [], role="user",
                          content="C", create_time=1700000030.0),
    }
    return make_chatgpt_conversation(title="Branching", mapping=mapping, current_node=current_node)


# ---------------------------------------------------------------------------
# Claude.ai
# ---------------------------------------------------------------------------

def claude_message(
    uuid: str,
    sender: str,
    text: str,
    created_at: str = "2026-02-18T03:23:11.721912Z",
) -> dict:
    """Build a Claude.ai chat message with an empty `text` and a content block."""
    return {
        "uuid": uuid,
        "text": "",
        "content": [{"type": "text", "text": text, "citations": []}],
        "sender": sender,
        "created_at": created_at,
        "updated_at": created_at,
        "attachments": [],
        "files": [],
    }


def make_claude_conversation(
    *,
    uuid: str = "conv-claude-1",
    name: str = "Trip to Rome",
    messages: list[dict] | None = None,
) -> dict:
    """Build a Claude.ai conversation export entry."""
    if messages is None:
        messages = [
            claude_message("m1", "human", "Hello!", "2026-02-18T03:23:11Z"),
            claude_message("m2", "assistant", "Hi there!", "2026-02-18T03:23:20Z"),
            claude_message("m3", "human", "How are you?", "2026-02-18T03:24:00Z"),
            claude_message("m4", "assistant", "I'm doing well!", "2026-02-18T03:24:10Z"),
        ]
    return {
        "uuid": uuid,
        "name": name,
        "created_at": "2026-02-18T03:23:09Z",
        "updated_at": "2026-02-18T05:39:56Z",
        "chat_messages": messages,
    }


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

def make_gemini_contents() -> list[dict]:
    """Gemini-style turns: role user/model with text parts."""
    return [
        {"role": "user", "parts": [{"text": "Name a prime number."}]},
        {"role": "model", "parts": [{"text": "Seven."}]},
    ]


# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------

GENERIC_MESSAGES = [
    {"role": "system", "content": "Be helpful.", "timestamp": 1700000000},
    {"role": "user", "content": "Hello!", "timestamp": 1700000010},
    {"role": "assistant", "content": "Hi! How can I help?", "timestamp": 1700000020},
]


def to_bytes(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")
