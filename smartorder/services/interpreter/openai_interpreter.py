"""OpenAI-backed interpreters."""
import json
import logging
from typing import Any, Dict, List, Optional
from openai import AsyncOpenAI, BadRequestError, OpenAIError
from pydantic import BaseModel, ValidationError

from smartorder.core.config import settings
from smartorder.services.catalog.importer import ExtractedProduct
from smartorder.services.interpreter.base import (
    InterpreterError,
    LanguageIdentifier,
    OrderInterpreter,
    ProductExtractor,
    SafetyBlockedError,
)
from smartorder.services.interpreter.prompts import (
    EXTRACT_PRODUCTS_PROMPT,
    IDENTIFY_LANGUAGE_PROMPT,
    get_extract_user_prompt,
    get_order_system_prompt,
    get_order_user_prompt,
)
from smartorder.services.ordering.models import ParsedOrderItem
from smartorder.services.storage.images import parse_data_uri

logger = logging.getLogger(__name__)

# Placeholder values models emit instead of omitting special requests
EMPTY_REQUEST_MARKERS = {"", "n/a", "na", "none", "null", "string", "-"}

KNOWN_LANGUAGES = {"yue-Hant-HK", "cmn-Hans-CN", "en-US", "mixed", "unknown"}


class RawOrderItem(BaseModel):
    """Order item as returned by the model."""

    item: str
    quantity: Any = 1
    specialRequests: Optional[str] = None
    isAmbiguous: Optional[bool] = False
    alternatives: Optional[List[str]] = None


class ParseOrderOutput(BaseModel):
    """Schema of the order parsing response."""

    orderItems: List[RawOrderItem] = []


class ExtractProductsOutput(BaseModel):
    """Schema of the image extraction response."""

    extractedProducts: List[ExtractedProduct] = []


def clean_special_requests(value: Optional[str]) -> Optional[str]:
    """Drop empty and placeholder special requests."""
    if value is None:
        return None
    value = value.strip()
    if value.lower() in EMPTY_REQUEST_MARKERS or value.lower().startswith("n/a"):
        return None
    return value


def to_parsed_item(raw: RawOrderItem) -> Optional[ParsedOrderItem]:
    """Normalize a model order item. Returns None for blank item names."""
    item_name = raw.item.strip()
    if not item_name:
        return None
    quantity = raw.quantity
    try:
        quantity = max(1, int(float(quantity)))
    except (TypeError, ValueError, OverflowError):
        quantity = 1
    return ParsedOrderItem(
        item_name=item_name,
        quantity=quantity,
        special_requests=clean_special_requests(raw.specialRequests),
        is_ambiguous=bool(raw.isAmbiguous),
        alternatives=[a.strip() for a in raw.alternatives or [] if a and a.strip()],
    )


class OpenAIJsonClient:
    """Shared chat completion call returning a JSON object."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self.client = client or AsyncOpenAI(api_key=settings.openai_api_key)
        self.model = model or settings.openai_model

    async def complete_json(
        self, messages: List[Dict[str, Any]], temperature: float = 0.0
    ) -> Dict[str, Any]:
        """Run a chat completion and decode its JSON content.

        Raises:
            SafetyBlockedError: the model or API refused on content policy.
            InterpreterError: the call failed or returned invalid JSON.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except BadRequestError as e:
            if getattr(e, "code", None) == "content_policy_violation":
                raise SafetyBlockedError(f"SAFETY: request blocked by content policy: {e}") from e
            raise InterpreterError(f"Model request rejected: {e}") from e
        except OpenAIError as e:
            raise InterpreterError(f"Model call failed: {e}") from e

        choice = response.choices[0]
        if choice.finish_reason == "content_filter" or getattr(choice.message, "refusal", None):
            raise SafetyBlockedError("SAFETY: response blocked by content filter")

        content = choice.message.content or ""
        logger.debug(f"[INTERPRETER] Raw model output: {content}")
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise InterpreterError(f"Model returned invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise InterpreterError("Model returned JSON that is not an object")
        return payload


class OpenAIOrderInterpreter(OrderInterpreter):
    """Order text interpreter using OpenAI chat completions."""

    def __init__(self, json_client: Optional[OpenAIJsonClient] = None):
        self.json_client = json_client or OpenAIJsonClient()

    async def interpret(
        self, order_text: str, menu_context: Optional[str] = None
    ) -> List[ParsedOrderItem]:
        payload = await self.json_client.complete_json(
            [
                {"role": "system", "content": get_order_system_prompt(menu_context)},
                {"role": "user", "content": get_order_user_prompt(order_text)},
            ]
        )
        try:
            output = ParseOrderOutput.model_validate(payload)
        except ValidationError as e:
            raise InterpreterError(f"Order output did not match schema: {e}") from e

        items = [item for item in map(to_parsed_item, output.orderItems) if item]
        logger.info(f"[INTERPRETER] Parsed {len(items)} order items from text")
        return items


class OpenAIProductExtractor(ProductExtractor):
    """Menu image extractor using OpenAI vision input."""

    def __init__(self, json_client: Optional[OpenAIJsonClient] = None):
        self.json_client = json_client or OpenAIJsonClient()

    async def extract(
        self, image_data_uri: str, context_prompt: Optional[str] = None
    ) -> List[ExtractedProduct]:
        # Validates MIME type and payload before spending a model call
        parse_data_uri(image_data_uri)

        payload = await self.json_client.complete_json(
            [
                {"role": "system", "content": EXTRACT_PRODUCTS_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": get_extract_user_prompt(context_prompt)},
                        {"type": "image_url", "image_url": {"url": image_data_uri}},
                    ],
                },
            ]
        )
        try:
            output = ExtractProductsOutput.model_validate(payload)
        except ValidationError as e:
            raise InterpreterError(f"Extraction output did not match schema: {e}") from e

        logger.info(f"[INTERPRETER] Extracted {len(output.extractedProducts)} products from image")
        return output.extractedProducts


class OpenAILanguageIdentifier(LanguageIdentifier):
    """Language identification using OpenAI chat completions."""

    def __init__(self, json_client: Optional[OpenAIJsonClient] = None):
        self.json_client = json_client or OpenAIJsonClient()

    async def identify(self, text: str) -> str:
        payload = await self.json_client.complete_json(
            [
                {"role": "system", "content": IDENTIFY_LANGUAGE_PROMPT},
                {"role": "user", "content": f'Text to analyze:\n"{text}"'},
            ]
        )
        language = payload.get("identifiedLanguage")
        if language not in KNOWN_LANGUAGES:
            return "unknown"
        return language
