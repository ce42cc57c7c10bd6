"""Input validation for generation requests.

Everything here is a pure function: no network calls are made, so the checks
can run before the pipeline is built.
"""

import re
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .errors import InputValidationError
from .models import GenerationRequest
from .youtube import is_valid_youtube_url

_YOUTUBE_API_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{39}$")

MIN_INSTRUCTION_LENGTH = 10


class FormValidationResult(BaseModel):
    """Outcome of validating the host's input form."""

    is_valid: bool
    errors: Dict[str, Union[str, List[Optional[str]]]] = Field(default_factory=dict)

    def first_error(self) -> Optional[str]:
        """Get the first error message, if any."""
        for error in self.errors.values():
            if isinstance(error, list):
                return next((message for message in error if message), None)
            return error
        return None


def is_valid_youtube_api_key_format(api_key: Optional[str]) -> bool:
    """Check that a YouTube API key looks like one (39 URL-safe characters)."""
    return bool(api_key) and bool(_YOUTUBE_API_KEY_PATTERN.match(api_key))


def is_valid_llm_api_key_format(api_key: Optional[str]) -> bool:
    """Check that an LLM API key is present.

    The real check is the live ping in yt2blog.llm.validate_api_key.
    """
    return bool(api_key)


def validate_form_inputs(
    youtube_api_key: Optional[str],
    llm_api_key: Optional[str],
    youtube_urls: Optional[List[str]],
    instruction: Optional[str],
) -> FormValidationResult:
    """Validate everything a user submits before any API is called.

    Args:
        youtube_api_key: YouTube Data API key.
        llm_api_key: OpenAI API key.
        youtube_urls: Video URLs; at least one is required.
        instruction: Writing instruction; at least 10 characters.

    Returns:
        FormValidationResult with one message per invalid field. URL errors are
        a list aligned with the input, None for URLs that are fine.
    """
    errors: Dict[str, Union[str, List[Optional[str]]]] = {}

    if not youtube_api_key:
        errors["youtube_api_key"] = "YouTube API key is required"
    elif not is_valid_youtube_api_key_format(youtube_api_key):
        errors["youtube_api_key"] = "Invalid YouTube API key format"

    if not llm_api_key:
        errors["llm_api_key"] = "LLM API key is required"
    elif not is_valid_llm_api_key_format(llm_api_key):
        errors["llm_api_key"] = "Invalid LLM API key format"

    if not youtube_urls or not youtube_urls[0]:
        errors["youtube_urls"] = "At least one YouTube URL is required"
    else:
        url_errors: List[Optional[str]] = []
        for url in youtube_urls:
            if not url:
                url_errors.append("URL cannot be empty")
            elif not is_valid_youtube_url(url):
                url_errors.append("Invalid YouTube URL")
            else:
                url_errors.append(None)
        if any(url_errors):
            errors["youtube_urls"] = url_errors

    if not instruction or not instruction.strip():
        errors["instruction"] = "Instruction is required"
    elif len(instruction) < MIN_INSTRUCTION_LENGTH:
        errors["instruction"] = f"Instruction is too short (minimum {MIN_INSTRUCTION_LENGTH} characters)"

    return FormValidationResult(is_valid=not errors, errors=errors)


def validate_generation_request(request: GenerationRequest) -> None:
    """Reject a generation request that cannot be run.

    Raises:
        InputValidationError: If the API key, content, or instruction is missing.
    """
    if not request.api_key:
        raise InputValidationError("API key is required")
    if not request.content:
        raise InputValidationError("Content is required")
    if not request.instruction or not request.instruction.strip():
        raise InputValidationError("Instruction is required")
