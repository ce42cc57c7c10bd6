#!/usr/bin/env python3
"""YT2Blog - CLI entrypoint for turning YouTube videos into articles."""

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from .chains import enhance_instructions, verify_article
from .config import DEFAULT_OUTPUT_DIR, Settings
from .errors import YT2BlogError, format_error_message
from .llm import ChatClient
from .models import ProgressStatus, TokenCost, TokenUsageSummary
from .pipeline import create_article
from .pricing import format_cost
from .progress import PipelineObserver, ProgressReporter, ProgressTracker
from .utils import extract_title, save_article
from .validation import validate_form_inputs

logger = logging.getLogger(__name__)

_STATUS_MARKS = {
    ProgressStatus.PENDING: " ",
    ProgressStatus.IN_PROGRESS: "…",
    ProgressStatus.COMPLETE: "✓",
    ProgressStatus.ERROR: "✗",
}


class ConsoleObserver(PipelineObserver):
    """Prints stage transitions and, when verbose, per-call costs."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def update_progress(self, stage: str, status: ProgressStatus) -> None:
        status = ProgressStatus(status)
        if status == ProgressStatus.PENDING and not self.verbose:
            return
        print(f"  [{_STATUS_MARKS[status]}] {stage}: {status.value}")

    def on_token_usage(self, cost: TokenCost) -> None:
        if self.verbose:
            print(f"      {cost.operation}: {cost.total_tokens} tokens ({format_cost(cost.total_cost)})")


def print_usage_summary(usage: TokenUsageSummary) -> None:
    """Print the token and cost summary of every LLM call in the run."""
    print("\nToken usage:")
    print(f"  Input tokens:  {usage.total_input_tokens}")
    print(f"  Output tokens: {usage.total_output_tokens}")
    print(f"  Total tokens:  {usage.total_tokens}")
    print(f"  Total cost:    {format_cost(usage.total_cost)}")
    for operation, count in usage.operation_counts.items():
        print(f"    - {operation} x{count}")


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Run one generation from parsed CLI arguments.

    Returns:
        Process exit code.
    """
    # Collects token usage from enhancement and verification as well as generation
    usage = ProgressTracker()
    console = ConsoleObserver(verbose=args.verbose)
    client = ChatClient(
        settings.openai_api_key,
        model=settings.model,
        request_timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        reporter=ProgressReporter(usage, console),
    )

    instruction = args.instruction
    if args.enhance:
        print("\nEnhancing instruction...")
        instruction = await enhance_instructions(client, instruction)
        print(f"  Enhanced instruction:\n{instruction}")

    print(f"\nGenerating article from {len(args.urls)} video(s)...")
    result = await create_article(
        settings,
        args.urls,
        instruction,
        keep_branding=args.keep_branding,
        search_internet=args.search_internet,
        feedback=args.feedback,
        observers=[usage, console],
    )

    if args.verbose:
        print(f"\nUsed {len(result.videos)} video(s):")
        for video in result.videos:
            print(f"  - {video.title} ({video.channel_title})")
        if result.web_search:
            print(f"Web search returned {len(result.web_search.sources)} source(s)")

    try:
        filepath = save_article(result.article, args.out_dir)
    except (OSError, UnicodeEncodeError) as e:
        print(f"Error: Failed to write article to '{args.out_dir}': {e}")
        return 1

    if args.verify:
        print("\nVerifying article quality...")
        analysis = await verify_article(client, result.article, instruction)
        status = "passed" if analysis.passed else "needs work"
        print(f"  Quality score: {analysis.score}/10 ({status})")
        if args.verbose:
            print(analysis.analysis)

    print_usage_summary(usage.summary())

    print("\n" + "=" * 60)
    print("SUCCESS! Article generated.")
    print(f"  File: {filepath}")
    print(f"  Title: {extract_title(result.article)}")
    print("=" * 60)
    return 0


def main():
    """Main entry point for the YT2Blog CLI."""
    parser = argparse.ArgumentParser(
        description="YT2Blog - Turn YouTube videos into a blog article",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  OPENAI_API_KEY   OpenAI API key (required)
  YOUTUBE_API_KEY  YouTube Data API key (required)
  OPENAI_MODEL     Chat model (default: gpt-4o)

Examples:
  # One video, default settings
  python -m yt2blog https://youtu.be/dQw4w9WgXcQ --instruction "Write a beginner's guide"

  # Several videos, with web research and a references section
  python -m yt2blog URL1 URL2 --instruction "Compare both talks" --search-internet --keep-branding

Requires Python 3.9 or higher.
""",
    )
    parser.add_argument(
        "urls",
        type=str,
        nargs="+",
        help="YouTube video URLs",
    )
    parser.add_argument(
        "--instruction",
        "-i",
        type=str,
        required=True,
        help="What the article should be about and how it should read",
    )
    parser.add_argument(
        "--keep-branding",
        action="store_true",
        help="Keep video and channel references and end with a references section",
    )
    parser.add_argument(
        "--search-internet",
        action="store_true",
        help="Research the topic before writing",
    )
    parser.add_argument(
        "--feedback",
        type=str,
        default=None,
        help="Feedback on a previous attempt to take into account",
    )
    parser.add_argument(
        "--enhance",
        action="store_true",
        help="Rewrite the instruction into a more detailed one first",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Score the finished article",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Chat model to use (default: OPENAI_MODEL or gpt-4o)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Deadline in seconds for each LLM call",
    )
    parser.add_argument(
        "--out-dir",
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for articles (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be done without calling any API",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    settings = Settings.from_env()
    overrides = {}
    if args.model:
        overrides["model"] = args.model
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    if overrides:
        try:
            settings = settings.with_overrides(**overrides)
        except ValidationError as e:
            parser.error(f"invalid option value: {e.errors()[0]['msg']}")

    if args.dry_run:
        print("Dry run mode - would perform the following:")
        print(f"  - Videos: {args.urls}")
        print(f"  - Instruction: {args.instruction}")
        print(f"  - Model: {settings.model}")
        print(f"  - Timeout: {settings.request_timeout:g}s")
        print(f"  - Web search: {args.search_internet}")
        print(f"  - Keep branding: {args.keep_branding}")
        print(f"  - Enhance instruction: {args.enhance}")
        print(f"  - Verify article: {args.verify}")
        print(f"  - Output directory: {args.out_dir}")
        return

    if not settings.openai_api_key:
        print("Error: OPENAI_API_KEY environment variable is required")
        sys.exit(1)
    if not settings.youtube_api_key:
        print("Error: YOUTUBE_API_KEY environment variable is required")
        sys.exit(1)

    validation = validate_form_inputs(settings.youtube_api_key, settings.openai_api_key, args.urls, args.instruction)
    if not validation.is_valid:
        for error in validation.errors.values():
            if isinstance(error, list):
                for url, message in zip(args.urls, error):
                    if message:
                        print(f"Error: {message}: {url}")
            else:
                print(f"Error: {error}")
        sys.exit(1)

    print("=" * 60)
    print("YT2BLOG - Generating your article")
    print("=" * 60)

    try:
        exit_code = asyncio.run(run(args, settings))
    except YT2BlogError as e:
        logger.debug("Generation failed", exc_info=True)
        print(f"Error: {format_error_message(e)}")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
