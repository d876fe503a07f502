"""Interpreter interfaces."""
from abc import ABC, abstractmethod
from typing import List, Optional

from smartorder.services.catalog.importer import ExtractedProduct
from smartorder.services.ordering.models import ParsedOrderItem


class InterpreterError(Exception):
    """An AI interpreter call failed (network, model or schema)."""


class SafetyBlockedError(InterpreterError):
    """The model refused the input on content-safety grounds."""


class OrderInterpreter(ABC):
    """Turns free order text into structured order items."""

    @abstractmethod
    async def interpret(
        self, order_text: str, menu_context: Optional[str] = None
    ) -> List[ParsedOrderItem]:
        pass


class ProductExtractor(ABC):
    """Reads product candidates off a menu image."""

    @abstractmethod
    async def extract(
        self, image_data_uri: str, context_prompt: Optional[str] = None
    ) -> List[ExtractedProduct]:
        pass


class LanguageIdentifier(ABC):
    """Identifies the primary language of a text."""

    @abstractmethod
    async def identify(self, text: str) -> str:
        pass
