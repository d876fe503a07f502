"""Unit tests for the OpenAI-backed interpreters."""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest
from openai import APIConnectionError, BadRequestError

from smartorder.services.interpreter.base import InterpreterError, SafetyBlockedError
from smartorder.services.interpreter.openai_interpreter import (
    OpenAIJsonClient,
    OpenAILanguageIdentifier,
    OpenAIOrderInterpreter,
    OpenAIProductExtractor,
    RawOrderItem,
    clean_special_requests,
    to_parsed_item,
)

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def completion(content, finish_reason="stop", refusal=None):
    """Build a minimal chat completion response."""
    message = SimpleNamespace(content=content, refusal=refusal)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


def make_client(response=None, error=None):
    """Mock AsyncOpenAI client returning `response` or raising `error`."""
    create = AsyncMock(return_value=response, side_effect=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def json_client(payload=None, **kwargs):
    content = json.dumps(payload) if payload is not None else kwargs.pop("content", "")
    client = make_client(response=completion(content, **kwargs))
    return OpenAIJsonClient(client=client, model="test-model")


class TestNormalization:
    """Test cleanup of model output."""

    def test_placeholder_requests_dropped(self):
        assert clean_special_requests("N/A") is None
        assert clean_special_requests(" none ") is None
        assert clean_special_requests("n/a - none") is None
        assert clean_special_requests("string") is None
        assert clean_special_requests("less ice") == "less ice"

    def test_quantity_coerced(self):
        assert to_parsed_item(RawOrderItem(item="Coke", quantity="2")).quantity == 2
        assert to_parsed_item(RawOrderItem(item="Coke", quantity=0)).quantity == 1
        assert to_parsed_item(RawOrderItem(item="Coke", quantity="two")).quantity == 1
        assert to_parsed_item(RawOrderItem(item="Coke", quantity=None)).quantity == 1
        assert to_parsed_item(RawOrderItem(item="Coke", quantity=float("inf"))).quantity == 1
        assert to_parsed_item(RawOrderItem(item="Coke", quantity=float("nan"))).quantity == 1

    def test_blank_item_skipped(self):
        assert to_parsed_item(RawOrderItem(item="  ")) is None


class TestOpenAIJsonClient:
    """Test error mapping of the shared completion call."""

    @pytest.mark.asyncio
    async def test_returns_object(self):
        client = json_client({"ok": True})
        assert await client.complete_json([]) == {"ok": True}

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = json_client(content="not json")
        with pytest.raises(InterpreterError):
            await client.complete_json([])

    @pytest.mark.asyncio
    async def test_non_object_json(self):
        client = json_client(content="[1, 2]")
        with pytest.raises(InterpreterError):
            await client.complete_json([])

    @pytest.mark.asyncio
    async def test_content_filter(self):
        client = json_client({"orderItems": []}, finish_reason="content_filter")
        with pytest.raises(SafetyBlockedError):
            await client.complete_json([])

    @pytest.mark.asyncio
    async def test_refusal(self):
        client = json_client(content="", refusal="I can't help with that.")
        with pytest.raises(SafetyBlockedError):
            await client.complete_json([])

    @pytest.mark.asyncio
    async def test_content_policy_violation(self):
        error = BadRequestError(
            "blocked",
            response=httpx.Response(400, request=REQUEST),
            body={"code": "content_policy_violation", "message": "blocked"},
        )
        client = OpenAIJsonClient(client=make_client(error=error), model="test-model")

        with pytest.raises(SafetyBlockedError, match="SAFETY"):
            await client.complete_json([])

    @pytest.mark.asyncio
    async def test_connection_error(self):
        client = OpenAIJsonClient(
            client=make_client(error=APIConnectionError(request=REQUEST)), model="test-model"
        )
        with pytest.raises(InterpreterError) as exc_info:
            await client.complete_json([])
        assert not isinstance(exc_info.value, SafetyBlockedError)


class TestOpenAIOrderInterpreter:
    """Test order text interpretation."""

    @pytest.mark.asyncio
    async def test_parses_items(self):
        payload = {
            "orderItems": [
                {"item": "Coke", "quantity": 2, "specialRequests": "no ice"},
                {"item": "Burger", "quantity": "1", "specialRequests": "N/A"},
                {"item": "tea", "isAmbiguous": True, "alternatives": ["Iced Lemon Tea", "Milk Tea"]},
            ]
        }
        client = json_client(payload)
        interpreter = OpenAIOrderInterpreter(json_client=client)

        items = await interpreter.interpret("two cokes no ice and a burger", "Menu:\n  - Coke $2.50")

        assert [(i.item_name, i.quantity) for i in items] == [("Coke", 2), ("Burger", 1), ("tea", 1)]
        assert items[0].special_requests == "no ice"
        assert items[1].special_requests is None
        assert items[2].is_ambiguous is True
        assert items[2].alternatives == ["Iced Lemon Tea", "Milk Tea"]

        messages = client.client.chat.completions.create.call_args.kwargs["messages"]
        assert "Coke $2.50" in messages[0]["content"]
        assert messages[1]["content"] == "Order Text: two cokes no ice and a burger"

    @pytest.mark.asyncio
    async def test_empty_order(self):
        interpreter = OpenAIOrderInterpreter(json_client=json_client({"orderItems": []}))
        assert await interpreter.interpret("hello there") == []

    @pytest.mark.asyncio
    async def test_schema_mismatch(self):
        interpreter = OpenAIOrderInterpreter(json_client=json_client({"orderItems": "Coke"}))
        with pytest.raises(InterpreterError):
            await interpreter.interpret("a coke")

    @pytest.mark.asyncio
    async def test_infinite_quantity_defaults_to_one(self):
        client = OpenAIJsonClient(
            client=make_client(response=completion('{"orderItems": [{"item": "Coke", "quantity": Infinity}]}')),
            model="test-model",
        )
        items = await OpenAIOrderInterpreter(json_client=client).interpret("a coke")

        assert [(i.item_name, i.quantity) for i in items] == [("Coke", 1)]


class TestOpenAIProductExtractor:
    """Test menu image extraction."""

    @pytest.mark.asyncio
    async def test_extracts_products(self, png_data_uri):
        payload = {
            "extractedProducts": [
                {"name": "Milk Tea", "price": 18, "category": "Drinks"},
                {"name": "Egg Tart"},
            ]
        }
        client = json_client(payload)
        extractor = OpenAIProductExtractor(json_client=client)

        products = await extractor.extract(png_data_uri, "prices are in HKD")

        assert [p.name for p in products] == ["Milk Tea", "Egg Tart"]
        assert products[0].price == 18
        assert products[1].price is None

        user_content = client.client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert user_content[1] == {"type": "image_url", "image_url": {"url": png_data_uri}}

    @pytest.mark.asyncio
    async def test_invalid_image_skips_model_call(self):
        client = json_client({"extractedProducts": []})
        extractor = OpenAIProductExtractor(json_client=client)

        with pytest.raises(ValueError):
            await extractor.extract("not-a-data-uri")
        client.client.chat.completions.create.assert_not_called()


class TestOpenAILanguageIdentifier:
    """Test language identification."""

    @pytest.mark.asyncio
    async def test_known_language(self):
        identifier = OpenAILanguageIdentifier(json_client=json_client({"identifiedLanguage": "yue-Hant-HK"}))
        assert await identifier.identify("唔該兩杯凍檸茶") == "yue-Hant-HK"

    @pytest.mark.asyncio
    async def test_unknown_code(self):
        identifier = OpenAILanguageIdentifier(json_client=json_client({"identifiedLanguage": "fr-FR"}))
        assert await identifier.identify("bonjour") == "unknown"
