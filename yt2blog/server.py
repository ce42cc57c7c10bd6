#!/usr/bin/env python3
"""YT2Blog API server launcher.

Loads the generation settings from the environment, applies any command line
overrides, reports what the API will run with, and hands the app factory to
uvicorn. Overrides are exported back into the environment so every uvicorn
worker builds the same Settings.

Usage:
    yt2blog-server [--host HOST] [--port PORT] [--model MODEL] [--timeout SECONDS]
"""

import argparse
import logging
import os
from typing import Dict, List, Optional

import uvicorn
from pydantic import ValidationError

from .config import VERSION, Settings

logger = logging.getLogger(__name__)

# Settings field -> environment variable read by Settings.from_env
_SETTINGS_ENV = {
    "model": "OPENAI_MODEL",
    "request_timeout": "YT2BLOG_REQUEST_TIMEOUT",
    "max_retries": "YT2BLOG_MAX_RETRIES",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="YT2Blog API Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  OPENAI_API_KEY           Default OpenAI key (requests may send X-OpenAI-Key instead)
  YOUTUBE_API_KEY          Default YouTube key (requests may send X-YouTube-Key instead)
  OPENAI_MODEL             Chat model (default: gpt-4o)
  YT2BLOG_REQUEST_TIMEOUT  Deadline in seconds for each LLM call
  YT2BLOG_MAX_RETRIES      Retries per LLM call

Examples:
    # Serve on localhost with the environment's settings
    yt2blog-server

    # Serve publicly with a cheaper model and a shorter deadline
    yt2blog-server --host 0.0.0.0 --model gpt-4o-mini --timeout 60
""",
    )
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker processes (default: 1)")
    parser.add_argument("--model", type=str, default=None, help="Chat model for every generation")
    parser.add_argument("--timeout", type=float, default=None, help="Deadline in seconds for each LLM call")
    parser.add_argument("--max-retries", type=int, default=None, help="Retries per LLM call")
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: info)",
    )
    return parser


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Build the server settings from the environment and the command line.

    Raises:
        pydantic.ValidationError: If an override is out of range.
    """
    overrides: Dict[str, object] = {}
    if args.model:
        overrides["model"] = args.model
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries

    settings = Settings.from_env()
    return settings.with_overrides(**overrides) if overrides else settings


def export_settings(settings: Settings) -> None:
    """Write the non-secret settings to the environment read by the app factory."""
    for field, env_var in _SETTINGS_ENV.items():
        os.environ[env_var] = str(getattr(settings, field))


def missing_key_warnings(settings: Settings) -> List[str]:
    """List the keys every request will have to send itself."""
    warnings = []
    if not settings.openai_api_key:
        warnings.append("OPENAI_API_KEY is not set; requests must send an X-OpenAI-Key header")
    if not settings.youtube_api_key:
        warnings.append("YOUTUBE_API_KEY is not set; article requests must send an X-YouTube-Key header")
    return warnings


def main(argv: Optional[List[str]] = None):
    """Main entry point for the API server."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = resolve_settings(args)
    except ValidationError as e:
        parser.error(f"invalid option value: {e.errors()[0]['msg']}")
    export_settings(settings)

    print("=" * 60)
    print(f"YT2BLOG API SERVER v{VERSION}")
    print("=" * 60)
    print(f"Listening: http://{args.host}:{args.port}")
    print(f"Model: {settings.model}")
    print(f"LLM call timeout: {settings.request_timeout:g}s (retries: {settings.max_retries})")
    print(f"Workers: {args.workers if not args.reload else 1}")
    print(f"Metrics: http://{args.host}:{args.port}/metrics")
    print("=" * 60)
    for warning in missing_key_warnings(settings):
        logger.warning(warning)

    uvicorn.run(
        "yt2blog.api.app:create_app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers if not args.reload else 1,
        log_level=args.log_level,
        factory=True,
    )


if __name__ == "__main__":
    main()
