"""Configuration settings for YT2Blog."""

import os
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .models import StyleConfig

VERSION: str = "0.1.0"

# LLM model name (can be overridden via environment variable)
LLM_MODEL_NAME: str = os.environ.get("OPENAI_MODEL", "gpt-4o")

# Deadline for a single outbound LLM call, in seconds
DEFAULT_REQUEST_TIMEOUT: float = 120.0

# Retries handed to the OpenAI client; 0 keeps one attempt per call
DEFAULT_MAX_RETRIES: int = 0

# Timeout for YouTube Data API requests, in seconds
YOUTUBE_REQUEST_TIMEOUT: int = 30

YOUTUBE_API_BASE_URL: str = "https://www.googleapis.com/youtube/v3"

# The three writing styles fanned out for every article
STYLE_CONFIGS: List[StyleConfig] = [
    StyleConfig(
        system_prompt=(
            "You are a professional content creator who writes high-quality, formal articles "
            "with academic rigor."
        ),
        temperature=0.5,
        label="Academic Style",
        progress_id="generation-academic",
        verification_id="academic-verification",
    ),
    StyleConfig(
        system_prompt=(
            "You are a creative storyteller who writes engaging, narrative-driven content "
            "that captivates readers."
        ),
        temperature=0.8,
        label="Creative Style",
        progress_id="generation-creative",
        verification_id="creative-verification",
    ),
    StyleConfig(
        system_prompt=(
            "You are a technical expert who writes clear, concise, and informative content "
            "with practical insights."
        ),
        temperature=0.3,
        label="Technical Style",
        progress_id="generation-technical",
        verification_id="technical-verification",
    ),
]

# Temperatures of the single-call stages
CRITIQUE_TEMPERATURE: float = 0.4
REFINEMENT_TEMPERATURE: float = 0.6
WEB_SEARCH_TEMPERATURE: float = 0.2
VERIFICATION_TEMPERATURE: float = 0.3
ENHANCEMENT_TEMPERATURE: float = 0.7

WEB_SEARCH_MAX_TOKENS: int = 1000

# Articles scoring at least this much in verification are considered passing
VERIFICATION_PASS_SCORE: int = 7

# Share of a combined token total attributed to input when the API
# reports only total_tokens
ESTIMATED_INPUT_SHARE: float = 0.3

# Pricing per million tokens (USD)
PRICING: Dict[str, Dict[str, float]] = {
    "gpt-4.1": {"input": 2.00, "output": 0.50},
    "gpt-4.1-2025-04-14": {"input": 2.00, "output": 0.50},
    "gpt-4o": {"input": 2.50, "output": 1.25},
    "gpt-4o-2024-08-06": {"input": 2.50, "output": 1.25},
    "gpt-4o-mini-search-preview": {"input": 0.15, "output": 0.60},
    "gpt-4o-mini-search-preview-2025-03-11": {"input": 0.15, "output": 0.60},
}

# Model used for pricing when the reported model is unknown
DEFAULT_PRICING_MODEL: str = "gpt-4o"

# Output directory for generated articles
DEFAULT_OUTPUT_DIR: str = "./articles"


class Settings(BaseModel):
    """Runtime settings handed to the pipeline by the host.

    API keys are held here rather than in module globals so the CLI and the
    HTTP API can each supply their own.
    """

    openai_api_key: Optional[str] = Field(default=None, repr=False)
    youtube_api_key: Optional[str] = Field(default=None, repr=False)
    model: str = LLM_MODEL_NAME
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Reads OPENAI_API_KEY, YOUTUBE_API_KEY, OPENAI_MODEL,
        YT2BLOG_REQUEST_TIMEOUT and YT2BLOG_MAX_RETRIES.
        """
        return cls(
            openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
            youtube_api_key=os.environ.get("YOUTUBE_API_KEY") or None,
            model=os.environ.get("OPENAI_MODEL", LLM_MODEL_NAME),
            request_timeout=float(os.environ.get("YT2BLOG_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
            max_retries=int(os.environ.get("YT2BLOG_MAX_RETRIES", DEFAULT_MAX_RETRIES)),
        )

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with the given fields replaced, validated like the original.

        Raises:
            pydantic.ValidationError: If an override is out of range.
        """
        return type(self)(**{**self.model_dump(), **overrides})
