"""Chat model abstraction and providers."""

from .base import BaseChatModel
from .providers import OpenAIChatModel

__all__ = ["BaseChatModel", "OpenAIChatModel"]
