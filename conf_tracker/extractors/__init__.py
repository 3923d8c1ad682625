"""Free-text query understanding."""

from conf_tracker.extractors.intent import extract_intent

__all__ = ["extract_intent"]
