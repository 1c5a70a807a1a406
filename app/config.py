"""
Configuration settings for the cv-composer application.

This file contains configuration for the LLM providers used by the
"Help Me Improve" suggestions and for the local storage slot.
You can easily switch between providers by changing the settings here.
"""

from dotenv import load_dotenv
load_dotenv()          # ← must be before os.getenv(...)
import os
from pathlib import Path

# LLM Provider Configuration
# Set to "ollama" or "openai"
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai")

# Model Configuration
# For Ollama: use models like "llama3.1:8b", "mistral:7b", etc.
# For OpenAI: use models like "gpt-4o-mini", "gpt-4o", etc.
DEFAULT_MODEL = {
    "ollama": "llama3.1:8b",
    "openai": "gpt-4o-mini"
}

# OpenAI Configuration (the key is checked when a client is built)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL_PARAMS = {
    "temperature": 0.7,
    "max_tokens": 1024
}

# Ollama Configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

# Suggestions give up after this many seconds
SUGGESTION_TIMEOUT = float(os.getenv("SUGGESTION_TIMEOUT", "60"))

# Local storage slot
STORAGE_PATH = Path(os.getenv("CV_STORAGE_PATH", ".cvdata/storage.json"))
STORAGE_KEY = os.getenv("CV_STORAGE_KEY", "cvData")

# Preview
DEFAULT_STYLE = os.getenv("CV_DEFAULT_STYLE", "professional")
PDF_FILENAME = "cv.pdf"


def get_model_for_provider(provider: str = None) -> str:
    """Get the default model for the specified provider."""
    provider = provider or LLM_PROVIDER
    return DEFAULT_MODEL.get(provider, "gpt-4o-mini")
