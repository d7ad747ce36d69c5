"""Helpers shared by the study material generators."""

from __future__ import annotations

from typing import Any

from summaryr.llm.client import LLMClient, LLMError, get_llm_client


class GenerationError(Exception):
    """Raised when the model cannot produce study material."""

    pass


def resolve_client(client: LLMClient | None) -> LLMClient:
    """Return client, or the configured client when None.

    Raises:
        GenerationError: If no client can be configured
    """
    if client is not None:
        return client
    try:
        return get_llm_client()
    except LLMError as e:
        raise GenerationError(str(e)) from e


def split_text(text: str, size: int) -> list[str]:
    """Consecutive slices of at most size characters."""
    return [text[i : i + size] for i in range(0, len(text), size)]


def extract_items(raw: Any, key: str) -> list[Any]:
    """List of items from a model response.

    Accepts {key: [...]}, a bare array, or any object holding a single list.
    """
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        items = raw.get(key)
        if isinstance(items, list):
            return items
        lists = [value for value in raw.values() if isinstance(value, list)]
        if len(lists) == 1:
            return lists[0]
    return []
