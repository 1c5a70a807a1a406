"""
LLM client abstraction layer to support multiple providers.

This module provides a unified interface for different LLM providers,
making it easy to switch between Ollama and OpenAI API while maintaining
the same interface for the rest of the application. The suggestion flow
only needs `improve_text`.
"""

from __future__ import annotations
import os
from typing import List, Dict
from abc import ABC, abstractmethod

import config

try:
    from ollama import Client as OllamaAPI
except ImportError:
    OllamaAPI = None

try:
    from openai import OpenAI
except ImportError:
    OpenAI = None


IMPROVE_PROMPT = (
    "Act as a professional career coach. Review the following CV section for clarity, "
    "impact, and professionalism. Rewrite it to be more compelling and suggest 3-5 "
    "bullet points to enhance it. Original text: {text}"
)


class LLMResponse:
    """Unified response object for LLM responses."""

    def __init__(self, content: str):
        self.message = MessageContent(content)


class MessageContent:
    """Message content wrapper."""

    def __init__(self, content: str):
        self.content = content


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def chat(self, model: str, messages: List[Dict[str, str]]) -> LLMResponse:
        """Send a chat request to the LLM provider."""


class OllamaClient(LLMClient):
    """Ollama client implementation."""

    def __init__(self, host: str | None = None):
        if OllamaAPI is None:
            raise ImportError("ollama package is required for OllamaClient")
        self.client = OllamaAPI(host=host or config.OLLAMA_BASE_URL)

    def chat(self, model: str, messages: List[Dict[str, str]]) -> LLMResponse:
        """Send a chat request to Ollama."""
        response = self.client.chat(model=model, messages=messages)
        return LLMResponse(response.message.content)


class OpenAIClient(LLMClient):
    """OpenAI client implementation."""

    def __init__(self, api_key: str | None = None):
        if OpenAI is None:
            raise ImportError("openai package is required for OpenAIClient")

        # Use provided API key or get from environment
        api_key = api_key or config.OPENAI_API_KEY or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY environment variable or pass api_key parameter.")

        self.client = OpenAI(api_key=api_key, timeout=config.SUGGESTION_TIMEOUT)

    def chat(self, model: str, messages: List[Dict[str, str]]) -> LLMResponse:
        """Send a chat request to OpenAI."""
        response = self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=config.OPENAI_MODEL_PARAMS.get("temperature", 0.7),
            max_tokens=config.OPENAI_MODEL_PARAMS.get("max_tokens", 1024),
        )

        return LLMResponse(response.choices[0].message.content)


def get_llm_client(provider: str | None = None) -> LLMClient:
    """Factory function to get the appropriate LLM client based on configuration."""
    provider = (provider or config.LLM_PROVIDER).lower()

    if provider == "openai":
        return OpenAIClient()
    elif provider == "ollama":
        return OllamaClient()
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")


# Create a global client instance lazily
_llm_client = None


def chat(model: str, messages: List[Dict[str, str]]) -> LLMResponse:
    """Unified chat function that works with any configured LLM provider."""
    global _llm_client
    if _llm_client is None:
        _llm_client = get_llm_client()

    return _llm_client.chat(model, messages)


def improve_text(text: str, model: str | None = None) -> str:
    """Ask the configured model for a more professional rewrite of `text`."""
    messages = [{"role": "user", "content": IMPROVE_PROMPT.format(text=text)}]
    rsp = chat(model=model or config.get_model_for_provider(), messages=messages)
    return (rsp.message.content or "").strip()
