"""
deskai-ollama - Ollama chat and embedding providers for the DeskAI host.
"""

from deskai_ollama.providers import OllamaChatProvider, OllamaEmbeddingProvider
from deskai_ollama.registry import register_default_providers

__version__ = "0.1.0"

__all__ = [
    "OllamaChatProvider",
    "OllamaEmbeddingProvider",
    "register_default_providers",
]
