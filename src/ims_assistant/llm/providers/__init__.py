"""Chat model providers."""

from .openai_provider import OpenAIChatModel

__all__ = ["OpenAIChatModel"]
