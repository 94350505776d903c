# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Grammar correction instruction shared by all backends.

Single source of truth for the built-in system prompt. Users can replace
it with [grammar] system_prompt in config.toml or PROOFREAD_SYSTEM_PROMPT.
"""

GRAMMAR_SYSTEM_PROMPT = (
    "You are a grammar correction tool. Improve the grammar of input prompts "
    "without adding extra text, explanations, or formatting. Output only the "
    "corrected text with no quotation marks or additional commentary."
)


def get_ollama_payload(model: str, system: str, prompt: str) -> dict:
    """
    Build the base /api/generate body for a streaming request.

    Args:
        model: Ollama model identifier
        system: System instruction ("" sends none)
        prompt: The user's text

    Returns:
        Request body without backend-specific options
    """
    payload = {
        "model": model,
        "prompt": prompt,
        "stream": True,
    }
    if system:
        payload["system"] = system
    return payload


def get_lm_studio_messages(system: str, prompt: str) -> list:
    """
    Get the chat messages for LM Studio (OpenAI format).

    Args:
        system: System instruction ("" sends none)
        prompt: The user's text

    Returns:
        List of message dictionaries for OpenAI-compatible API
    """
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages
