"""
Providers the host application loads.

Protocol defines WHAT, implementations define HOW.
"""

from .base import EmbeddingProvider, LLMProvider
from .ollama import OllamaChatProvider, OllamaEmbeddingProvider

__all__ = [
    "EmbeddingProvider",
    "LLMProvider",
    "OllamaChatProvider",
    "OllamaEmbeddingProvider",
]
