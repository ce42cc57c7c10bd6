"""Web-search enrichment step.

The research itself is delegated to the chat model; the trailing "Sources:"
block of its reply is parsed into WebSource entries. The reply format is not
guaranteed by the model, so parsing is best-effort: anything that does not
look like a source still becomes an entry with ``url='#'``.
"""

import logging
import re
from typing import List

from .config import WEB_SEARCH_MAX_TOKENS, WEB_SEARCH_TEMPERATURE
from .errors import InputValidationError
from .llm import ChatClient
from .models import WebSearchResult, WebSource
from .prompts import RESEARCH_ASSISTANT_SYSTEM_PROMPT, build_web_search_prompt

logger = logging.getLogger(__name__)

_SOURCES_PATTERN = re.compile(r"sources?:?\s*([\s\S]*)", re.IGNORECASE)
# A line that opens the sources block, e.g. "Sources:", "**Key Sources**", "### Sources"
_SOURCES_HEADING_PATTERN = re.compile(r"^[\W_]*(?:key\s+)?sources?\b", re.IGNORECASE | re.MULTILINE)
_URL_PATTERN = re.compile(r"https?://[^\s)\]>]+")
_LIST_MARKER_PATTERN = re.compile(r"^(?:\d+[.)]?|[-*•])\s*")
_WORD_PATTERN = re.compile(r"\w")
_TITLE_TRIM_CHARS = " -:|*[]().,;–—"


def parse_sources(text: str) -> List[WebSource]:
    """Parse the "Sources" block at the end of a research reply.

    Args:
        text: The full reply text.

    Returns:
        One WebSource per line containing text after the last "Sources" heading.
        The first URL on a line becomes the url and the rest the title; lines
        without a URL get url '#', lines without a title get 'Source'.
    """
    headings = list(_SOURCES_HEADING_PATTERN.finditer(text))
    if headings:
        # Anchor on the last heading so "open-source" in the body is not a match
        text = text[headings[-1].start():]

    match = _SOURCES_PATTERN.search(text)
    if not match or not match.group(1):
        return []

    sources = []
    for line in match.group(1).strip().split("\n"):
        if not _WORD_PATTERN.search(line):
            continue
        url_match = _URL_PATTERN.search(line)
        url = url_match.group(0).rstrip(".,;") if url_match else ""
        title = line.replace(url, "", 1) if url else line
        title = _LIST_MARKER_PATTERN.sub("", title.strip()).strip(_TITLE_TRIM_CHARS)
        sources.append(WebSource(title=title or "Source", url=url or "#"))
    return sources


async def perform_web_search(client: ChatClient, topic: str) -> WebSearchResult:
    """Research a topic with the chat model.

    Args:
        client: Chat client to use; its reporter receives the token usage.
        topic: The topic to research, typically the joined video titles.

    Returns:
        WebSearchResult with the raw summary and the parsed sources.

    Raises:
        InputValidationError: If the topic is empty.
        UpstreamError: If the LLM call fails.
    """
    if not topic or not topic.strip():
        raise InputValidationError("Topic is required")

    logger.info(f"Performing web search for: {topic}")
    summary = await client.complete(
        system_prompt=RESEARCH_ASSISTANT_SYSTEM_PROMPT,
        prompt=build_web_search_prompt(topic),
        temperature=WEB_SEARCH_TEMPERATURE,
        operation=f"Web Search: {topic[:20]}...",
        action="perform web search",
        max_tokens=WEB_SEARCH_MAX_TOKENS,
    )

    sources = parse_sources(summary)
    logger.info(f"Web search returned {len(sources)} sources")
    return WebSearchResult(summary=summary, sources=sources)
