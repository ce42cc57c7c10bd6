"""Prompt construction for every LLM call in the pipeline.

All builders are pure string functions so the exact text sent to the model
can be asserted in tests.
"""

from typing import Dict, List, Optional, Sequence

from .models import DraftResult, VideoContent, WebSearchResult

WEB_SEARCH_MARKER = "ADDITIONAL WEB SEARCH INFORMATION"

REMOVE_BRANDING_DIRECTIVE = (
    "IMPORTANT: Remove all branding and references to original source content from the body of "
    "the article. Do not mention YouTube, channel names, or any other identifying information "
    "from the original videos."
)

OMIT_REFERENCES_DIRECTIVE = (
    "Do NOT include a references, sources, or bibliography section at the end of the article."
)

APPEND_REFERENCES_DIRECTIVE = (
    'At the end of the article, add a "References" section that lists the original YouTube '
    "videos (title, channel and URL) and any web sources used (title and URL)."
)

# System roles
RESEARCH_ASSISTANT_SYSTEM_PROMPT = (
    "You are a research assistant that provides accurate, up-to-date information. "
    "Format your responses as bullet points with key facts."
)
CRITIC_SYSTEM_PROMPT = (
    "You are an expert editor who provides detailed, honest, and constructive criticism."
)
REFINER_SYSTEM_PROMPT = (
    "You are a master editor and content creator who can synthesize the best elements of "
    "multiple articles while addressing their weaknesses."
)
VERIFIER_SYSTEM_PROMPT = (
    "You are a quality assurance expert who provides detailed, objective analysis of content quality."
)
ENHANCER_SYSTEM_PROMPT = (
    "You are an expert content strategist who helps users create better instructions for AI "
    "content generation."
)


def count_words(text: str) -> int:
    """Count whitespace-separated words in an article."""
    return len(text.split())


def build_video_summaries(content: Dict[str, VideoContent]) -> str:
    """Render one Title/Channel/Description/Transcript block per video."""
    blocks = []
    for video in content.values():
        blocks.append(
            f"Title: {video.title}\n"
            f"Channel: {video.channel_title}\n"
            f"Description: {video.description}\n"
            f"Transcript: {video.transcript}"
        )
    return "\n\n".join(blocks)


def build_topic(content: Dict[str, VideoContent]) -> str:
    """Derive the web-search topic from the video titles."""
    return ", ".join(video.title for video in content.values() if video.title)


def _web_search_section(web_search: WebSearchResult) -> str:
    lines = [f"{WEB_SEARCH_MARKER}:", web_search.summary.strip()]
    if web_search.sources:
        lines.append("")
        lines.append("Sources:")
        for index, source in enumerate(web_search.sources, 1):
            lines.append(f"{index}. {source.title} - {source.url}")
    return "\n".join(lines)


def _references_listing(content: Dict[str, VideoContent], web_search: Optional[WebSearchResult]) -> str:
    lines: List[str] = []
    for video in content.values():
        lines.append(f"- YouTube: {video.title} by {video.channel_title} ({video.url})")
    if web_search:
        for source in web_search.sources:
            lines.append(f"- Web: {source.title} ({source.url})")
    return "\n".join(lines)


def build_base_prompt(
    content: Dict[str, VideoContent],
    instruction: str,
    keep_branding: bool = False,
    web_search: Optional[WebSearchResult] = None,
    feedback: Optional[str] = None,
) -> str:
    """Build the prompt shared by all three style generators.

    Args:
        content: Video content keyed by URL.
        instruction: The user's instruction.
        keep_branding: Whether a references section should be appended.
        web_search: Optional enrichment to embed.
        feedback: Optional feedback from an earlier attempt.

    Returns:
        The prompt text.
    """
    sections = [
        "You are tasked with writing an article based on the following YouTube video content:",
        build_video_summaries(content),
    ]

    if web_search:
        sections.append(_web_search_section(web_search))

    sections.append(f"The article should follow these instructions:\n{instruction}")
    sections.append(REMOVE_BRANDING_DIRECTIVE)

    if keep_branding:
        sections.append(APPEND_REFERENCES_DIRECTIVE)
    else:
        sections.append(OMIT_REFERENCES_DIRECTIVE)

    if feedback:
        sections.append(f"Previous feedback for improvement:\n{feedback}")

    return "\n\n".join(sections)


def build_web_search_prompt(topic: str) -> str:
    """Build the research request sent to the web-search step."""
    return (
        f"Research the latest information about: {topic}. Focus on facts, statistics, and recent "
        "developments. Format the results as a concise bullet-point list of the most important facts "
        "that would be useful for writing an article. Include 3-5 key sources at the end, under a "
        '"Sources:" heading, one per line with its URL.'
    )


def build_critique_prompt(article: str, instruction: str, style_label: str) -> str:
    """Build the prompt asking for a critique of one draft."""
    word_count = count_words(article)
    return f"""You are a critical editor reviewing an article. The article was written in a "{style_label}" style.

The article was supposed to follow these instructions:
{instruction}

Here is the article to critique:
{article}

WORD COUNT: {word_count} words

Provide a detailed critique of this article. Focus on:
1. How well it follows the instructions (especially any word count requirements)
2. Content quality and accuracy
3. Structure and flow
4. Language and style
5. Areas for improvement

Be specific about whether the word count matches any requirements in the instructions. If there was a specific word count requested and this article doesn't match it, emphasize this as an important issue to fix.

Be specific and constructive in your criticism."""


def build_refinement_prompt(
    drafts: Sequence[DraftResult],
    instruction: str,
    content: Dict[str, VideoContent],
    keep_branding: bool = False,
    web_search: Optional[WebSearchResult] = None,
) -> str:
    """Build the prompt that merges all drafts and critiques into one article.

    Args:
        drafts: The style drafts with their critiques.
        instruction: The user's instruction.
        content: Video content keyed by URL.
        keep_branding: Whether the final article should carry a references section.
        web_search: Optional enrichment whose sources may be referenced.

    Returns:
        The prompt text.
    """
    parts = [
        "You are an expert editor tasked with creating the best possible article based on the "
        "following materials.",
        f"The article should be based on this YouTube video content:\n{build_video_summaries(content)}",
        f"The article must follow these instructions:\n{instruction}",
        f"You have been provided with {len(drafts)} different articles and their criticisms:",
    ]

    for index, draft in enumerate(drafts, 1):
        parts.append(
            f"--- ARTICLE {index} ({draft.label}) ---\n"
            f"WORD COUNT: {count_words(draft.article)} words\n\n"
            f"{draft.article}\n\n"
            f"--- CRITICISM OF ARTICLE {index} ---\n"
            f"{draft.criticism}"
        )

    if keep_branding:
        references = (
            '6. Do not mention YouTube, channel names, or other source branding in the body of the article. '
            'Instead, end the article with a "References" section in exactly this format:\n'
            "References\n"
            "- YouTube: <video title> by <channel name> (<video URL>)\n"
            "- Web: <source title> (<source URL>)\n"
            "Use these entries:\n"
            f"{_references_listing(content, web_search)}"
        )
    else:
        references = (
            "6. CRITICAL: Remove all branding and references to original source content. Do not mention "
            "YouTube, channel names, or any other identifying information from the original videos. "
            "Do NOT include a references, sources, or bibliography section."
        )

    parts.append(
        "Your task is to create a new article that:\n"
        "1. Follows the original instructions PERFECTLY, especially any word count requirements\n"
        f"2. Takes the best elements from each of the {len(drafts)} articles\n"
        "3. Addresses the criticisms raised for each article\n"
        "4. Creates a coherent, high-quality piece that is better than any of the individual articles\n"
        "5. IMPORTANT: If the instructions specified a word count, make sure your article meets that "
        "exact word count requirement\n"
        f"{references}"
    )
    parts.append(
        "Before submitting your final article, count the words and verify it meets any word count "
        "requirements specified in the instructions.\n\nWrite the final article now."
    )
    return "\n\n".join(parts)


def build_verification_prompt(article: str, instruction: str) -> str:
    """Build the quality-analysis prompt for a finished article."""
    word_count = count_words(article)
    return f"""You are a quality assurance expert tasked with analyzing an article.

The article was supposed to be written according to these instructions:
{instruction}

Here is the article to analyze:
{article}

WORD COUNT: {word_count} words

Please provide a detailed analysis of this article based on the following criteria:
1. Adherence to instructions (how well does it follow the given instructions, especially any word count requirements?)
2. Content quality (depth, accuracy, and relevance)
3. Structure and organization (logical flow, clarity)
4. Writing style and engagement (readability, tone)
5. Overall impact and value to the reader

For each criterion, provide a score from 1-10 and specific observations.
If the instructions specified a word count requirement, explicitly mention whether this article meets that requirement.
Then, provide an overall assessment with strengths and areas for improvement."""


def build_enhancement_prompt(instruction: str) -> str:
    """Build the prompt that rewrites a user's instruction into a richer one."""
    return f"""You are an expert content strategist helping a user create better instructions for an AI article generator.

The user is using a tool that converts YouTube videos into blog articles. The user provides:
1. YouTube video URLs (which are processed to extract transcripts and content)
2. Instructions for how they want the article to be written

After the article is generated, it may be evaluated by an AI verifier on:
- Adherence to instructions
- Content quality (depth, accuracy, and relevance)
- Structure and organization (logical flow, clarity)
- Writing style and engagement (readability, tone)
- Overall impact and value to the reader

The user has provided the following instructions:
"{instruction}"

Enhance these instructions into a more detailed, specific, and effective prompt. Consider:
- Specific details about tone, style, and voice
- The target audience
- Structure elements (headings, sections)
- Content priorities (what to emphasize or de-emphasize)
- Measurable quality criteria the verifier can check
- Making requirements explicit and unambiguous

Keep the user's original intent, including any word count, and reply with the enhanced instructions only."""
