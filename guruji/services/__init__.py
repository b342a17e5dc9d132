"""Business logic services."""

from .completion import CompletionResult, CompletionService
from .fallback import pick_fallback
from .relay import RelayService

__all__ = ["CompletionResult", "CompletionService", "RelayService", "pick_fallback"]
