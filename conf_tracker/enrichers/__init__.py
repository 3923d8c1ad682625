"""Clients for the remote embedding and text-generation services."""

from conf_tracker.enrichers.embedding import Embedder, JinaEmbedder
from conf_tracker.enrichers.llm import DeepSeekResponder

__all__ = ["Embedder", "JinaEmbedder", "DeepSeekResponder"]
