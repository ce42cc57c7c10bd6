"""API routes for YT2Blog.

This module defines the RESTful endpoints for:
- Article generation from YouTube videos
- Article quality verification
- Instruction enhancement
- API key validation
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from .. import llm, youtube
from ..chains import enhance_instructions, verify_article
from ..config import VERSION, Settings
from ..errors import InputValidationError
from ..llm import ChatClient
from ..pipeline import create_article
from ..progress import ProgressTracker
from ..utils import extract_title
from ..validation import is_valid_youtube_api_key_format
from .dependencies import get_request_settings
from .schemas import (
    ArticleRequest,
    ArticleResponse,
    EnhanceRequest,
    EnhanceResponse,
    HealthResponse,
    KeyValidationResponse,
    VerifyRequest,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["articles"])


def _chat_client(settings: Settings, tracker: ProgressTracker) -> ChatClient:
    if not settings.openai_api_key:
        raise InputValidationError("API key is required")
    return ChatClient(
        settings.openai_api_key,
        model=settings.model,
        request_timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        reporter=tracker,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health(settings: Settings = Depends(get_request_settings)) -> HealthResponse:
    """Report that the service is up."""
    return HealthResponse(status="healthy", version=VERSION, model=settings.model)


@router.post(
    "/articles",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate an article",
    description="Scrape the videos, draft in three styles, critique each draft, and refine them into one article.",
)
async def generate_article(
    body: ArticleRequest,
    settings: Settings = Depends(get_request_settings),
) -> ArticleResponse:
    """Generate an article from YouTube videos."""
    logger.info(f"Generating article from {len(body.urls)} video(s)")
    result = await create_article(
        settings,
        body.urls,
        body.instruction,
        keep_branding=body.keep_branding,
        search_internet=body.search_internet,
        feedback=body.feedback,
    )
    logger.info(f"Article generated, total cost ${result.token_usage.total_cost:.4f}")
    return ArticleResponse(
        article=result.article,
        title=extract_title(result.article),
        videos=result.videos,
        web_search=result.web_search,
        token_usage=result.token_usage,
        progress=result.progress,
    )


@router.post(
    "/articles/verify",
    response_model=VerifyResponse,
    summary="Score an article",
)
async def verify(
    body: VerifyRequest,
    settings: Settings = Depends(get_request_settings),
) -> VerifyResponse:
    """Analyze the quality of a finished article."""
    tracker = ProgressTracker()
    analysis = await verify_article(_chat_client(settings, tracker), body.article, body.instruction)
    return VerifyResponse(**analysis.model_dump(), token_usage=tracker.summary())


@router.post(
    "/instructions/enhance",
    response_model=EnhanceResponse,
    summary="Enhance an instruction",
)
async def enhance(
    body: EnhanceRequest,
    settings: Settings = Depends(get_request_settings),
) -> EnhanceResponse:
    """Rewrite an instruction into a more specific one."""
    tracker = ProgressTracker()
    instruction = await enhance_instructions(_chat_client(settings, tracker), body.instruction)
    return EnhanceResponse(instruction=instruction, token_usage=tracker.summary())


@router.post(
    "/keys/validate",
    response_model=KeyValidationResponse,
    summary="Validate API keys",
    description="Check the format of both keys and confirm them with a lightweight call to each API.",
)
async def validate_keys(settings: Settings = Depends(get_request_settings)) -> KeyValidationResponse:
    """Validate the YouTube and OpenAI keys."""
    errors = {}

    youtube_valid = False
    if not settings.youtube_api_key:
        errors["youtube_api_key"] = "YouTube API key is required"
    elif not is_valid_youtube_api_key_format(settings.youtube_api_key):
        errors["youtube_api_key"] = "Invalid YouTube API key format"
    else:
        youtube_valid = await asyncio.to_thread(youtube.validate_api_key, settings.youtube_api_key)
        if not youtube_valid:
            errors["youtube_api_key"] = "YouTube API key was rejected"

    openai_valid = False
    if not settings.openai_api_key:
        errors["openai_api_key"] = "OpenAI API key is required"
    else:
        openai_valid = await llm.validate_api_key(settings.openai_api_key, settings.model)
        if not openai_valid:
            errors["openai_api_key"] = "OpenAI API key was rejected"

    return KeyValidationResponse(
        youtube_api_key_valid=youtube_valid,
        openai_api_key_valid=openai_valid,
        errors=errors,
    )
