"""Generate → critique → refine pipeline.

One generation runs as follows:

    web search (optional, best-effort)
        │
    base prompt
        ├── academic draft  → academic critique ──┐
        ├── creative draft  → creative critique ──┼── refinement → article
        └── technical draft → technical critique ─┘

The three branches run concurrently and are joined fail-fast: the first
branch to raise cancels the others and the error propagates to the caller,
so refinement only ever sees one draft per style.
"""

import asyncio
import logging
from typing import Awaitable, Iterable, List, Optional, Tuple, TypeVar

from .chains import critique_draft, generate_draft, refine_drafts
from .config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    LLM_MODEL_NAME,
    STYLE_CONFIGS,
    Settings,
)
from .errors import InputValidationError, PipelineError
from .llm import ChatClient
from .metrics import get_tracer, track_generation, track_stage
from .models import (
    DraftResult,
    GenerationRequest,
    GenerationResult,
    ProgressStatus,
    StyleConfig,
    WebSearchResult,
)
from .progress import PipelineObserver, ProgressReporter, ProgressTracker, Stage
from .prompts import build_base_prompt, build_topic
from .validation import validate_form_inputs, validate_generation_request
from .web_search import perform_web_search
from .youtube import scrape_videos

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_fail_fast(aws: Iterable[Awaitable[T]]) -> List[T]:
    """Run awaitables concurrently; on the first failure cancel the rest.

    Args:
        aws: Coroutines or futures to run.

    Returns:
        Results in the order the awaitables were given.

    Raises:
        The first exception raised by any awaitable. If the caller is
        cancelled, every awaitable is cancelled too.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    for task in tasks:
        if task in done and not task.cancelled() and task.exception() is not None:
            raise task.exception()

    return [task.result() for task in tasks]


class ArticlePipeline:
    """Turns video content and an instruction into one refined article.

    Attributes:
        model: Chat model used for every call.
        request_timeout: Deadline in seconds for each LLM call.
        max_retries: Retries handed to the OpenAI client.
        reporter: Receives progress and token-usage events.
    """

    def __init__(
        self,
        model: str = LLM_MODEL_NAME,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        reporter: Optional[PipelineObserver] = None,
    ):
        self.model = model
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.reporter = reporter or ProgressReporter()
        self.styles: List[StyleConfig] = list(STYLE_CONFIGS)

    @classmethod
    def from_settings(cls, settings: Settings, reporter: Optional[PipelineObserver] = None) -> "ArticlePipeline":
        """Build a pipeline from host settings."""
        return cls(
            model=settings.model,
            request_timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            reporter=reporter,
        )

    def _update(self, stage: str, status: ProgressStatus) -> None:
        self.reporter.update_progress(stage, status)

    def _client(self, api_key: str) -> ChatClient:
        return ChatClient(
            api_key,
            model=self.model,
            request_timeout=self.request_timeout,
            max_retries=self.max_retries,
            reporter=self.reporter,
        )

    async def generate(self, request: GenerationRequest) -> str:
        """Run the whole pipeline for one request.

        Args:
            request: The generation request.

        Returns:
            The final article.

        Raises:
            InputValidationError: Before any LLM call, if the request is incomplete.
            UpstreamError: If any draft, critique, or the refinement fails.
        """
        article, _ = await self.generate_with_context(request)
        return article

    async def generate_with_context(self, request: GenerationRequest) -> Tuple[str, Optional[WebSearchResult]]:
        """Run the pipeline and also return the web-search result it used.

        Returns:
            Tuple of (article, web_search) where web_search is None when
            enrichment was disabled or failed.
        """
        validate_generation_request(request)

        stages = [s for style in self.styles for s in (style.progress_id, style.verification_id)]
        stages.append(Stage.FINAL_GENERATION)
        if request.search_internet:
            stages.insert(0, Stage.WEB_SEARCH)
        for stage in stages:
            self._update(stage, ProgressStatus.PENDING)

        client = self._client(request.api_key)
        tracer = get_tracer()

        with track_generation(), tracer.start_as_current_span(
            "pipeline.generate",
            attributes={
                "pipeline.videos": len(request.content),
                "pipeline.search_internet": request.search_internet,
                "pipeline.keep_branding": request.keep_branding,
            },
        ):
            web_search = None
            if request.search_internet:
                web_search = await self._enrich(client, request)

            base_prompt = build_base_prompt(
                request.content,
                request.instruction,
                keep_branding=request.keep_branding,
                web_search=web_search,
                feedback=request.feedback,
            )

            logger.info(f"Starting parallel article generation with {len(self.styles)} different styles...")
            drafts = await gather_fail_fast(
                self._run_branch(client, style, base_prompt, request.instruction) for style in self.styles
            )

            if len(drafts) != len(self.styles):
                raise PipelineError(f"Expected {len(self.styles)} drafts, got {len(drafts)}")

            logger.info("All articles generated and criticized. Creating final refined version...")
            self._update(Stage.GENERATION_COMPLETE, ProgressStatus.COMPLETE)
            self._update(Stage.VERIFICATION_COMPLETE, ProgressStatus.COMPLETE)

            self._update(Stage.FINAL_GENERATION, ProgressStatus.IN_PROGRESS)
            try:
                with track_stage(Stage.FINAL_GENERATION):
                    article = await refine_drafts(
                        client,
                        drafts,
                        request.instruction,
                        request.content,
                        keep_branding=request.keep_branding,
                        web_search=web_search,
                    )
            except BaseException:
                self._update(Stage.FINAL_GENERATION, ProgressStatus.ERROR)
                raise
            self._update(Stage.FINAL_GENERATION, ProgressStatus.COMPLETE)

        return article, web_search

    async def _enrich(self, client: ChatClient, request: GenerationRequest) -> Optional[WebSearchResult]:
        """Run the web search, downgrading any failure to "no enrichment"."""
        self._update(Stage.WEB_SEARCH, ProgressStatus.IN_PROGRESS)
        try:
            with track_stage(Stage.WEB_SEARCH):
                result = await perform_web_search(client, build_topic(request.content))
        except Exception as e:
            logger.warning(f"Web search failed, continuing without it: {e}")
            self._update(Stage.WEB_SEARCH, ProgressStatus.ERROR)
            return None
        self._update(Stage.WEB_SEARCH, ProgressStatus.COMPLETE)
        return result

    async def _run_branch(
        self,
        client: ChatClient,
        style: StyleConfig,
        base_prompt: str,
        instruction: str,
    ) -> DraftResult:
        """Draft and then critique in one style."""
        stage = style.progress_id
        self._update(stage, ProgressStatus.IN_PROGRESS)
        try:
            with track_stage(stage, **{"pipeline.style": style.label}):
                article = await generate_draft(client, base_prompt, style)
            self._update(stage, ProgressStatus.COMPLETE)

            stage = style.verification_id
            self._update(stage, ProgressStatus.IN_PROGRESS)
            with track_stage(stage, **{"pipeline.style": style.label}):
                criticism = await critique_draft(client, article, instruction, style.label)
            self._update(stage, ProgressStatus.COMPLETE)
        except BaseException:
            # Also reached when a sibling branch failed and this one was cancelled
            self._update(stage, ProgressStatus.ERROR)
            raise

        return DraftResult(article=article, criticism=criticism, label=style.label)


async def create_article(
    settings: Settings,
    urls: List[str],
    instruction: str,
    keep_branding: bool = False,
    search_internet: bool = False,
    feedback: Optional[str] = None,
    observers: Iterable[PipelineObserver] = (),
) -> GenerationResult:
    """Scrape the videos and generate an article from them.

    Every video is fetched before any LLM call; if one fails the whole
    request is aborted.

    Args:
        settings: Host settings, including both API keys.
        urls: YouTube video URLs.
        instruction: The user's writing instruction.
        keep_branding: Whether the article should end with references.
        search_internet: Whether to run the web-search enrichment.
        feedback: Optional feedback from an earlier attempt.
        observers: Extra observers for progress and token events.

    Returns:
        GenerationResult with the article, videos, token usage and progress.

    Raises:
        InputValidationError: If a key, URL or the instruction is missing or malformed.
        ContentFetchError: If a video cannot be fetched.
        UpstreamError: If generation fails.
    """
    validation = validate_form_inputs(settings.youtube_api_key, settings.openai_api_key, urls, instruction)
    if not validation.is_valid:
        raise InputValidationError(validation.first_error())

    logger.info(f"Scraping {len(urls)} video(s)...")
    content = await asyncio.to_thread(scrape_videos, settings.youtube_api_key, urls)

    tracker = ProgressTracker()
    reporter = ProgressReporter(tracker, *observers)
    pipeline = ArticlePipeline.from_settings(settings, reporter=reporter)

    request = GenerationRequest(
        api_key=settings.openai_api_key,
        content=content,
        instruction=instruction,
        keep_branding=keep_branding,
        search_internet=search_internet,
        feedback=feedback,
    )
    article, web_search = await pipeline.generate_with_context(request)

    return GenerationResult(
        article=article,
        videos=list(content.values()),
        web_search=web_search,
        token_usage=tracker.summary(),
        progress=tracker.snapshot(),
    )
