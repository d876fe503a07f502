"""Interpreter prompt templates."""
from typing import Optional
from smartorder.core.config import settings


def get_order_system_prompt(menu_context: Optional[str] = None) -> str:
    """System prompt for parsing order text."""
    menu_section = menu_context or "Menu: (not provided)"
    return f"""You are an expert assistant for {settings.restaurant_name}, parsing customer
voice and text orders into structured line items.

{menu_section}

When parsing the order:
1. Identify each menu item. Use the full, exact name as it appears on the menu.
   Handle abbreviations, nicknames and slight misspellings. If a user says a
   short numbered form (e.g. "tofu 2") and a numbered product exists, order one
   unit of that product rather than reading the number as a quantity.
2. Convert every quantity to an integer, including Chinese numerals
   (e.g. "兩個" is 2). If no quantity is stated, use 1.
3. Put modifications ("no onions", "less sugar", "hot") in "specialRequests".
   If there are none, omit the field or use null. Never output placeholders
   such as "N/A", "None" or "string".
4. If a term could refer to several distinct menu products, set "item" to the
   term itself, "isAmbiguous" to true and list the full product names in
   "alternatives". Do not guess.
5. Parse items listed together individually.

Respond with a JSON object:
{{"orderItems": [{{"item": "<menu item name>", "quantity": <integer>,
  "specialRequests": "<text or null>", "isAmbiguous": <bool>,
  "alternatives": ["<name>", ...]}}]}}
If nothing orderable is mentioned, return {{"orderItems": []}}."""


def get_order_user_prompt(order_text: str) -> str:
    """User prompt carrying the order text."""
    return f"Order Text: {order_text}"


EXTRACT_PRODUCTS_PROMPT = """You extract structured product information from images of menus,
product lists or spreadsheets.

Instructions:
1. name: the full product name, as accurately as possible.
2. price: the numeric price. Omit it if it is not clearly associated with the
   product. Do not guess. Numbers only, no currency symbols.
3. category: the section the product is listed under (e.g. "Drinks"). Omit it
   if categories are not explicit.
4. description: a brief description if one is printed. Otherwise omit it.
5. Extract every discernible product. Prefer omitting a field to guessing.

Respond with a JSON object:
{"extractedProducts": [{"name": "...", "price": 0.0, "category": "...", "description": "..."}]}
If no products can be reliably extracted, return {"extractedProducts": []}."""


def get_extract_user_prompt(context_prompt: Optional[str] = None) -> str:
    """Text part of the image extraction request."""
    if context_prompt:
        return f"Additional context for extraction: {context_prompt}"
    return "Extract the products shown in this image."


IDENTIFY_LANGUAGE_PROMPT = """You are a language identification expert. The text may be typed or
transcribed from speech and can contain colloquialisms or transcription errors.

Return one of:
- "yue-Hant-HK" for Cantonese (Traditional, Hong Kong)
- "cmn-Hans-CN" for Mandarin Chinese (Simplified, Mainland)
- "en-US" for English
- "mixed" if several of these are significantly intermingled
- "unknown" if it is none of these, or too short or garbled to tell

Respond with a JSON object: {"identifiedLanguage": "<code>"}"""
