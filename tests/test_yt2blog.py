"""Tests for the YT2Blog package."""

import re

import pytest


def test_imports():
    """Test that all modules can be imported."""
    from yt2blog import (
        STYLE_CONFIGS,
        ArticlePipeline,
        ChatClient,
        GenerationRequest,
        ProgressTracker,
        Stage,
        VideoContent,
        create_article,
        extract_title,
        generate_filename,
        get_date_string,
        slugify,
    )
    assert True


def test_style_configs():
    """Test the three writing styles and their stage keys."""
    from yt2blog import STYLE_CONFIGS

    assert [style.label for style in STYLE_CONFIGS] == ["Academic Style", "Creative Style", "Technical Style"]
    assert [style.temperature for style in STYLE_CONFIGS] == [0.5, 0.8, 0.3]
    assert [style.progress_id for style in STYLE_CONFIGS] == [
        "generation-academic",
        "generation-creative",
        "generation-technical",
    ]
    assert [style.verification_id for style in STYLE_CONFIGS] == [
        "academic-verification",
        "creative-verification",
        "technical-verification",
    ]


def test_slugify():
    """Test slugify function."""
    from yt2blog import slugify

    assert slugify("Hello World") == "hello-world"
    assert slugify("Quantum Computing: A Guide!") == "quantum-computing-a-guide"
    assert len(slugify("word " * 100)) <= 100


def test_get_date_string():
    """Test get_date_string returns YYYY-MM-DD."""
    from yt2blog import get_date_string

    assert re.match(r"^\d{4}-\d{2}-\d{2}$", get_date_string())


def test_generate_filename():
    """Test generate_filename function."""
    from yt2blog import generate_filename

    filename = generate_filename("Quantum Computing Explained")
    assert re.match(r"^\d{4}-\d{2}-\d{2}-quantum-computing-explained\.md$", filename)


def test_generate_filename_without_title():
    """Test generate_filename falls back for titles with no usable characters."""
    from yt2blog import generate_filename

    assert generate_filename("!!!").endswith("-article.md")


@pytest.mark.parametrize(
    "article,expected",
    [
        ("# Quantum Computing\n\nBody", "Quantum Computing"),
        ("Intro line\n\n## Section Two\n", "Section Two"),
        ("**Bold Title**\n\nBody", "Bold Title"),
        ("", "article"),
    ],
)
def test_extract_title(article, expected):
    """Test extract_title picks the first heading or line."""
    from yt2blog import extract_title

    assert extract_title(article) == expected


def test_save_article(tmp_path):
    """Test save_article writes a dated file named after the title."""
    from yt2blog import save_article

    filepath = save_article("# My Article\n\nHello", tmp_path / "out")

    assert filepath.parent == tmp_path / "out"
    assert filepath.name.endswith("-my-article.md")
    assert filepath.read_text(encoding="utf-8") == "# My Article\n\nHello"


def test_settings_from_env(monkeypatch):
    """Test Settings reads keys and overrides from the environment."""
    from yt2blog import Settings

    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("YOUTUBE_API_KEY", "yt-env")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
    monkeypatch.setenv("YT2BLOG_REQUEST_TIMEOUT", "45")
    monkeypatch.setenv("YT2BLOG_MAX_RETRIES", "2")

    settings = Settings.from_env()

    assert settings.openai_api_key == "sk-env"
    assert settings.youtube_api_key == "yt-env"
    assert settings.model == "gpt-4.1"
    assert settings.request_timeout == 45.0
    assert settings.max_retries == 2
    assert "sk-env" not in repr(settings)


def test_settings_defaults(monkeypatch):
    """Test Settings defaults when nothing is configured."""
    from yt2blog import Settings

    for name in ("OPENAI_API_KEY", "YOUTUBE_API_KEY", "YT2BLOG_REQUEST_TIMEOUT", "YT2BLOG_MAX_RETRIES"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.openai_api_key is None
    assert settings.request_timeout == 120.0
    assert settings.max_retries == 0


def test_settings_overrides_are_validated():
    """Test with_overrides keeps the other fields and applies field constraints."""
    from pydantic import ValidationError

    from yt2blog import Settings

    settings = Settings(openai_api_key="sk-test", model="gpt-4o")

    updated = settings.with_overrides(request_timeout=30)

    assert updated.request_timeout == 30
    assert updated.openai_api_key == "sk-test"
    assert settings.request_timeout == 120.0

    with pytest.raises(ValidationError):
        settings.with_overrides(request_timeout=-5)
    with pytest.raises(ValidationError):
        settings.with_overrides(max_retries=-1)
