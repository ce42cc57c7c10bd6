"""Utility functions for YT2Blog."""

import re
from datetime import datetime
from pathlib import Path
from typing import Union

from slugify import slugify as python_slugify

_HEADING_PATTERN = re.compile(r"^\s*#{1,6}\s+(.+?)\s*#*\s*$", re.MULTILINE)

DEFAULT_TITLE = "article"


def slugify(text: str, max_length: int = 100) -> str:
    """Convert text to a URL-friendly slug.

    Args:
        text: The text to convert to a slug.
        max_length: Maximum length of the slug (default: 100).

    Returns:
        A URL-friendly slug version of the text.
    """
    return python_slugify(text, max_length=max_length)


def get_date_string() -> str:
    """Get the current date in YYYY-MM-DD format."""
    return datetime.now().strftime("%Y-%m-%d")


def extract_title(article: str) -> str:
    """Get the title of a markdown article.

    Uses the first markdown heading, falling back to the first non-blank line.

    Args:
        article: The article text.

    Returns:
        The title, or "article" for an empty article.
    """
    match = _HEADING_PATTERN.search(article or "")
    if match:
        return match.group(1).strip("*_ ")

    for line in (article or "").splitlines():
        if line.strip():
            return line.strip().strip("*_# ")
    return DEFAULT_TITLE


def generate_filename(title: str) -> str:
    """Generate a filename for an article.

    Args:
        title: The title of the article.

    Returns:
        A filename in the format 'YYYY-MM-DD-slug.md'.
    """
    slug = slugify(title) or DEFAULT_TITLE
    return f"{get_date_string()}-{slug}.md"


def save_article(article: str, out_dir: Union[str, Path]) -> Path:
    """Write an article into a directory, named after its title.

    Args:
        article: The article text.
        out_dir: Directory to write into; created if missing.

    Returns:
        Path of the written file.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    filepath = directory / generate_filename(extract_title(article))
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(article)
    return filepath
