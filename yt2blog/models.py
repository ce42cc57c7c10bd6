"""Pydantic models for YT2Blog.

Note: This module uses typing.List/Dict for compatibility with Python 3.8+,
though the project requires Python 3.9+ for other features.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Get current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


class ProgressStatus(str, Enum):
    """Status of a single pipeline stage."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"
    ERROR = "error"


class VideoContent(BaseModel):
    """Metadata and transcript of one YouTube video."""

    video_id: str
    url: str
    title: str
    description: str = ""
    transcript: str = ""
    channel_title: str = ""
    published_at: Optional[str] = None


class GenerationRequest(BaseModel):
    """Everything the pipeline needs to produce one article."""

    api_key: str = Field(default="", repr=False)
    content: Dict[str, VideoContent] = Field(default_factory=dict)  # keyed by URL
    instruction: str = ""
    keep_branding: bool = False
    search_internet: bool = False
    feedback: Optional[str] = None


class StyleConfig(BaseModel):
    """Configuration of one writing style in the generation fan-out."""

    system_prompt: str
    temperature: float
    label: str
    progress_id: str
    verification_id: str


class DraftResult(BaseModel):
    """A style-specific draft together with its critique."""

    article: str
    criticism: str
    label: str


class WebSource(BaseModel):
    """A source cited by the web-search enrichment step."""

    title: str
    url: str


class WebSearchResult(BaseModel):
    """Result of the web-search enrichment step."""

    summary: str
    sources: List[WebSource] = Field(default_factory=list)


class TokenCost(BaseModel):
    """Token usage and cost of a single LLM call."""

    model: str
    operation: str
    timestamp: datetime = Field(default_factory=utc_now)
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0


class UsageDetail(BaseModel):
    """One line of a token usage summary."""

    id: int
    operation: str
    model: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    cost: float


class TokenUsageSummary(BaseModel):
    """Aggregated token usage across many LLM calls."""

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_tokens: int = 0
    total_cost: float = 0.0
    model_counts: Dict[str, int] = Field(default_factory=dict)
    operation_counts: Dict[str, int] = Field(default_factory=dict)
    detailed_usage: List[UsageDetail] = Field(default_factory=list)


class ArticleAnalysis(BaseModel):
    """Quality analysis of a finished article."""

    score: int
    analysis: str
    passed: bool


class GenerationResult(BaseModel):
    """What the host gets back from a full URL-to-article run."""

    article: str
    videos: List[VideoContent] = Field(default_factory=list)
    web_search: Optional[WebSearchResult] = None
    token_usage: TokenUsageSummary = Field(default_factory=TokenUsageSummary)
    progress: Dict[str, List[ProgressStatus]] = Field(default_factory=dict)


class ErrorReport(BaseModel):
    """User-facing description of a failure."""

    message: str
    context: str
    timestamp: datetime = Field(default_factory=utc_now)
