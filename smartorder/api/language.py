"""Language identification endpoint."""
import logging
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from smartorder.core.dependencies import get_language_identifier
from smartorder.services.interpreter.base import InterpreterError, LanguageIdentifier

router = APIRouter()
logger = logging.getLogger(__name__)


class IdentifyLanguageRequest(BaseModel):
    text: str = Field(min_length=1)


class IdentifyLanguageResponse(BaseModel):
    identified_language: str


@router.post("/api/language/identify", response_model=IdentifyLanguageResponse)
async def identify_language(
    body: IdentifyLanguageRequest,
    identifier: LanguageIdentifier = Depends(get_language_identifier),
):
    """BCP 47 code of the text's primary language."""
    try:
        language = await identifier.identify(body.text)
    except InterpreterError as e:
        logger.error(f"[LANGUAGE] Identification failed: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Language identification failed. Please try again.")
    return IdentifyLanguageResponse(identified_language=language)
