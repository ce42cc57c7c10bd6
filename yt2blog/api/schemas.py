"""Request and response bodies for the HTTP API."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import ArticleAnalysis, ProgressStatus, TokenUsageSummary, VideoContent, WebSearchResult


class ArticleRequest(BaseModel):
    """Body of POST /api/articles."""

    urls: List[str] = Field(..., min_length=1, description="YouTube video URLs")
    instruction: str = Field(..., description="What the article should cover and how it should read")
    keep_branding: bool = Field(default=False, description="End the article with a references section")
    search_internet: bool = Field(default=False, description="Research the topic before writing")
    feedback: Optional[str] = Field(default=None, description="Feedback on a previous attempt")


class ArticleResponse(BaseModel):
    """A generated article with everything that went into it."""

    article: str
    title: str
    videos: List[VideoContent]
    web_search: Optional[WebSearchResult] = None
    token_usage: TokenUsageSummary
    progress: Dict[str, List[ProgressStatus]]


class VerifyRequest(BaseModel):
    """Body of POST /api/articles/verify."""

    article: str
    instruction: str


class EnhanceRequest(BaseModel):
    """Body of POST /api/instructions/enhance."""

    instruction: str


class VerifyResponse(ArticleAnalysis):
    """Quality analysis plus what the verification call cost."""

    token_usage: TokenUsageSummary


class EnhanceResponse(BaseModel):
    instruction: str
    token_usage: TokenUsageSummary


class KeyValidationResponse(BaseModel):
    """Result of checking both API keys."""

    youtube_api_key_valid: bool
    openai_api_key_valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str
    version: str
    model: str
