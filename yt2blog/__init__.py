"""YT2Blog package.

Turns YouTube videos into an article by drafting in three styles,
critiquing every draft, and refining them into one final piece.

Requires Python 3.9 or higher.
"""

from .chains import (
    critique_draft,
    enhance_instructions,
    generate_draft,
    parse_quality_score,
    refine_drafts,
    verify_article,
)
from .config import LLM_MODEL_NAME, STYLE_CONFIGS, VERSION, Settings
from .errors import (
    ContentFetchError,
    InputValidationError,
    InvalidApiKeyError,
    PipelineError,
    UpstreamError,
    UpstreamTimeoutError,
    YT2BlogError,
    create_error_report,
    format_error_message,
)
from .llm import ChatClient, extract_token_usage, get_llm
from .models import (
    ArticleAnalysis,
    DraftResult,
    ErrorReport,
    GenerationRequest,
    GenerationResult,
    ProgressStatus,
    StyleConfig,
    TokenCost,
    TokenUsageSummary,
    UsageDetail,
    VideoContent,
    WebSearchResult,
    WebSource,
)
from .pipeline import ArticlePipeline, create_article, gather_fail_fast
from .pricing import calculate_token_cost, estimate_token_split, format_cost, summarize_token_usage
from .progress import CallbackObserver, PipelineObserver, ProgressReporter, ProgressTracker, Stage
from .prompts import build_base_prompt, build_critique_prompt, build_refinement_prompt, count_words
from .utils import extract_title, generate_filename, get_date_string, save_article, slugify
from .validation import FormValidationResult, validate_form_inputs, validate_generation_request
from .web_search import parse_sources, perform_web_search
from .youtube import extract_video_id, is_valid_youtube_url, scrape_videos, scrape_youtube_content

__version__ = VERSION

__all__ = [
    # Pipeline
    "ArticlePipeline",
    "create_article",
    "gather_fail_fast",
    # Chains
    "generate_draft",
    "critique_draft",
    "refine_drafts",
    "verify_article",
    "enhance_instructions",
    "parse_quality_score",
    # Web search
    "perform_web_search",
    "parse_sources",
    # LLM access
    "ChatClient",
    "get_llm",
    "extract_token_usage",
    # Prompts
    "build_base_prompt",
    "build_critique_prompt",
    "build_refinement_prompt",
    "count_words",
    # Progress
    "Stage",
    "PipelineObserver",
    "CallbackObserver",
    "ProgressReporter",
    "ProgressTracker",
    # Pricing
    "calculate_token_cost",
    "estimate_token_split",
    "format_cost",
    "summarize_token_usage",
    # Config
    "LLM_MODEL_NAME",
    "STYLE_CONFIGS",
    "Settings",
    # Models
    "ArticleAnalysis",
    "DraftResult",
    "ErrorReport",
    "GenerationRequest",
    "GenerationResult",
    "ProgressStatus",
    "StyleConfig",
    "TokenCost",
    "TokenUsageSummary",
    "UsageDetail",
    "VideoContent",
    "WebSearchResult",
    "WebSource",
    # Errors
    "YT2BlogError",
    "InputValidationError",
    "PipelineError",
    "UpstreamError",
    "InvalidApiKeyError",
    "UpstreamTimeoutError",
    "ContentFetchError",
    "format_error_message",
    "create_error_report",
    # Validation
    "FormValidationResult",
    "validate_form_inputs",
    "validate_generation_request",
    # YouTube
    "extract_video_id",
    "is_valid_youtube_url",
    "scrape_videos",
    "scrape_youtube_content",
    # Utils
    "extract_title",
    "generate_filename",
    "get_date_string",
    "save_article",
    "slugify",
]
