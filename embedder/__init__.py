"""Discord link embedder: reposts Rumble and Truth Social links as rich preview cards."""

__version__ = "1.0.0"
