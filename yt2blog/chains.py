"""LangChain chains for drafting, critiquing, and refining articles."""

import logging
import re
from typing import Dict, List, Optional

from .config import (
    CRITIQUE_TEMPERATURE,
    ENHANCEMENT_TEMPERATURE,
    REFINEMENT_TEMPERATURE,
    STYLE_CONFIGS,
    VERIFICATION_PASS_SCORE,
    VERIFICATION_TEMPERATURE,
)
from .errors import InputValidationError, PipelineError
from .llm import ChatClient
from .models import ArticleAnalysis, DraftResult, StyleConfig, VideoContent, WebSearchResult
from .prompts import (
    CRITIC_SYSTEM_PROMPT,
    ENHANCER_SYSTEM_PROMPT,
    REFINER_SYSTEM_PROMPT,
    VERIFIER_SYSTEM_PROMPT,
    build_critique_prompt,
    build_enhancement_prompt,
    build_refinement_prompt,
    build_verification_prompt,
)

logger = logging.getLogger(__name__)

_SCORE_PATTERN = re.compile(r"\b([1-9]|10)\b\s*(?:/\s*10)?")
DEFAULT_QUALITY_SCORE = 7


async def generate_draft(client: ChatClient, base_prompt: str, style: StyleConfig) -> str:
    """Generate one article draft in the given style.

    Args:
        client: Chat client for the call.
        base_prompt: Prompt shared by all styles.
        style: The style to write in.

    Returns:
        The raw draft text.
    """
    logger.info(f"Generating draft: {style.label}")
    return await client.complete(
        system_prompt=style.system_prompt,
        prompt=base_prompt,
        temperature=style.temperature,
        operation=f"Generation: {style.label}",
        action="generate article",
    )


async def critique_draft(client: ChatClient, article: str, instruction: str, style_label: str) -> str:
    """Critique a draft against the user's instruction.

    Args:
        client: Chat client for the call.
        article: The draft to critique.
        instruction: The user's original instruction.
        style_label: Label of the style the draft was written in.

    Returns:
        The critique text.
    """
    logger.info(f"Critiquing draft: {style_label}")
    return await client.complete(
        system_prompt=CRITIC_SYSTEM_PROMPT,
        prompt=build_critique_prompt(article, instruction, style_label),
        temperature=CRITIQUE_TEMPERATURE,
        operation=f"Critique: {style_label}",
        action="generate criticism",
    )


async def refine_drafts(
    client: ChatClient,
    drafts: List[DraftResult],
    instruction: str,
    content: Dict[str, VideoContent],
    keep_branding: bool = False,
    web_search: Optional[WebSearchResult] = None,
) -> str:
    """Synthesize the final article from every draft and critique.

    Args:
        client: Chat client for the call.
        drafts: One DraftResult per configured style.
        instruction: The user's original instruction.
        content: Video content keyed by URL.
        keep_branding: Whether the article should end with a references section.
        web_search: Optional enrichment whose sources may be referenced.

    Returns:
        The final article.

    Raises:
        PipelineError: If there is not exactly one draft per style.
    """
    if len(drafts) != len(STYLE_CONFIGS):
        raise PipelineError(f"Refinement needs {len(STYLE_CONFIGS)} drafts, got {len(drafts)}")

    logger.info("Creating final refined article")
    return await client.complete(
        system_prompt=REFINER_SYSTEM_PROMPT,
        prompt=build_refinement_prompt(drafts, instruction, content, keep_branding, web_search),
        temperature=REFINEMENT_TEMPERATURE,
        operation="Refinement",
        action="generate refined article",
    )


def parse_quality_score(analysis: str, default: int = DEFAULT_QUALITY_SCORE) -> int:
    """Average every 1-10 score mentioned in an analysis.

    Matches bare integers from 1 to 10, optionally written as "n/10".

    Args:
        analysis: The analysis text.
        default: Score to use when none is found.

    Returns:
        The rounded mean score.
    """
    scores = [int(match.group(1)) for match in _SCORE_PATTERN.finditer(analysis)]
    if not scores:
        return default
    return int(sum(scores) / len(scores) + 0.5)


async def verify_article(client: ChatClient, article: str, instruction: str) -> ArticleAnalysis:
    """Analyze the quality of a finished article.

    Args:
        client: Chat client for the call.
        article: The article to analyze.
        instruction: The instruction it was written for.

    Returns:
        ArticleAnalysis with an overall score and the full analysis text.

    Raises:
        InputValidationError: If the article or instruction is empty.
    """
    if not article:
        raise InputValidationError("Article is required")
    if not instruction:
        raise InputValidationError("Instruction is required")

    logger.info("Analyzing article quality...")
    analysis = await client.complete(
        system_prompt=VERIFIER_SYSTEM_PROMPT,
        prompt=build_verification_prompt(article, instruction),
        temperature=VERIFICATION_TEMPERATURE,
        operation="Verification",
        action="analyze article",
    )

    score = parse_quality_score(analysis)
    return ArticleAnalysis(score=score, analysis=analysis, passed=score >= VERIFICATION_PASS_SCORE)


async def enhance_instructions(client: ChatClient, instruction: str) -> str:
    """Rewrite a user's instruction into a more specific one.

    Args:
        client: Chat client for the call.
        instruction: The user's original instruction.

    Returns:
        The enhanced instruction.

    Raises:
        InputValidationError: If the instruction is shorter than 3 characters.
    """
    if not instruction or len(instruction.strip()) < 3:
        raise InputValidationError("Original instruction is required")

    logger.info("Enhancing user instructions...")
    return await client.complete(
        system_prompt=ENHANCER_SYSTEM_PROMPT,
        prompt=build_enhancement_prompt(instruction),
        temperature=ENHANCEMENT_TEMPERATURE,
        operation="Instruction Enhancement",
        action="enhance instructions",
    )
