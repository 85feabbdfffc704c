"""Lightweight OpenAI client helper.

Centralises API-key handling so the rest of the codebase can simply do:

    from src.openai_client import chat_completion

and know that the ``openai`` package is configured with credentials.
"""
from __future__ import annotations

import os
import types
from typing import Any, Dict, List, Optional

from src import config


class OpenAIClientError(RuntimeError):
    """Raised when client configuration is invalid (e.g., missing API key)."""


def _load_openai() -> types.ModuleType:
    """Import ``openai`` lazily.

    Loading is deferred so that unit tests can inject a stub into
    ``sys.modules`` before this function runs.
    """

    import importlib

    return importlib.import_module("openai")


def _ensure_api_key_present() -> str:
    """Return the ``OPENAI_API_KEY`` env var or raise.

    Raises
    ------
    OpenAIClientError
        If the env var is missing or empty.
    """

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise OpenAIClientError("OPENAI_API_KEY environment variable is not set.")
    return api_key


def get_openai_client() -> types.ModuleType:
    """Configure and return the ``openai`` module.

    This sets ``openai.api_key`` and, if provided, ``openai.organization`` and
    ``openai.base_url`` (for OpenAI-compatible gateways). Subsequent calls
    reuse the configured module.
    """

    openai = _load_openai()

    if getattr(openai, "api_key", None):  # already configured
        return openai

    openai.api_key = _ensure_api_key_present()

    org = os.getenv("OPENAI_ORG")
    if org:
        openai.organization = org

    base_url = os.getenv("OPENAI_BASE_URL")
    if base_url:
        openai.base_url = base_url

    return openai


def chat_completion(
    messages: List[Dict[str, str]],
    *,
    model: Optional[str] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Wrapper around ``openai.chat.completions.create`` with sane defaults.

    Parameters
    ----------
    messages
        Chat messages in OpenAI format.
    model
        Model id to use (default: ``config.OPENAI_MODEL``).
    kwargs
        Additional parameters forwarded to ``chat.completions.create``.

    The response is flattened to a plain ``dict`` with at least
    ``{"choices": [{"message": {"content": ...}}]}`` so callers and test stubs
    never depend on the client's response classes.
    """

    openai = get_openai_client()
    completion = openai.chat.completions.create(
        model=model or config.OPENAI_MODEL, messages=messages, **kwargs
    )

    choices = [
        {"message": {"content": choice.message.content}}
        for choice in completion.choices
    ]
    return {"choices": choices, "model": completion.model}
