"""Tests for the CLI entrypoint."""

import sys
from unittest.mock import AsyncMock, patch

import pytest

from yt2blog.__main__ import ConsoleObserver, main
from yt2blog.models import GenerationResult, ProgressStatus
from yt2blog.pricing import calculate_token_cost, summarize_token_usage

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
VALID_YOUTUBE_KEY = "AIza" + "B" * 35


@pytest.fixture
def api_keys(monkeypatch):
    """Configure both API keys."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("YOUTUBE_API_KEY", VALID_YOUTUBE_KEY)


def _run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["yt2blog", *args])
    main()


def _create_article_mock(sample_video):
    """Stand in for create_article, reporting one refinement call to the observers."""
    cost = calculate_token_cost("gpt-4o", 30, 70, "Refinement")
    result = GenerationResult(
        article="# Quantum Computing for Beginners\n\nBody text.",
        videos=[sample_video],
        token_usage=summarize_token_usage([cost]),
    )

    async def create(settings, urls, instruction, **kwargs):
        for observer in kwargs.get("observers", ()):
            observer.on_token_usage(cost)
        return result

    return AsyncMock(side_effect=create)


def test_dry_run(monkeypatch, capsys):
    """Test dry run prints the plan without calling any API."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with patch("yt2blog.__main__.create_article") as mock_create:
        _run_cli(monkeypatch, VIDEO_URL, "--instruction", "Write a guide", "--dry-run", "--search-internet")

    mock_create.assert_not_called()
    out = capsys.readouterr().out
    assert "Dry run mode" in out
    assert "Web search: True" in out


def test_invalid_url(monkeypatch, capsys, api_keys):
    """Test invalid URLs exit with an error."""
    with patch("yt2blog.__main__.create_article") as mock_create:
        with pytest.raises(SystemExit) as exc_info:
            _run_cli(monkeypatch, VIDEO_URL, "https://example.com/video", "--instruction", "Write a guide")

    assert exc_info.value.code == 1
    mock_create.assert_not_called()
    out = capsys.readouterr().out
    assert "Error: Invalid YouTube URL: https://example.com/video" in out
    assert VIDEO_URL not in out


def test_short_instruction(monkeypatch, capsys, api_keys):
    """Test the minimum instruction length is enforced before any API call."""
    with patch("yt2blog.__main__.create_article") as mock_create:
        with pytest.raises(SystemExit) as exc_info:
            _run_cli(monkeypatch, VIDEO_URL, "--instruction", "Qubits")

    assert exc_info.value.code == 1
    mock_create.assert_not_called()
    assert "Instruction is too short" in capsys.readouterr().out


def test_missing_openai_key(monkeypatch, capsys):
    """Test a missing OpenAI key exits with an error."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("YOUTUBE_API_KEY", VALID_YOUTUBE_KEY)

    with pytest.raises(SystemExit) as exc_info:
        _run_cli(monkeypatch, VIDEO_URL, "--instruction", "Write a guide")

    assert exc_info.value.code == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().out


@pytest.mark.parametrize("timeout", ["-5", "0"])
def test_out_of_range_timeout_is_rejected(monkeypatch, capsys, api_keys, timeout):
    """Test --timeout goes through the same validation as the environment."""
    with patch("yt2blog.__main__.create_article") as mock_create:
        with pytest.raises(SystemExit) as exc_info:
            _run_cli(monkeypatch, VIDEO_URL, "--instruction", "Write a guide", "--timeout", timeout)

    assert exc_info.value.code == 2
    mock_create.assert_not_called()
    assert "invalid option value" in capsys.readouterr().err


def test_generates_and_saves(monkeypatch, capsys, tmp_path, api_keys, sample_video):
    """Test a full run writes the article and prints the cost summary."""
    out_dir = tmp_path / "articles"
    mock_create = _create_article_mock(sample_video)

    with patch("yt2blog.__main__.create_article", new=mock_create):
        _run_cli(
            monkeypatch,
            VIDEO_URL,
            "--instruction",
            "Write a guide",
            "--keep-branding",
            "--out-dir",
            str(out_dir),
            "--model",
            "gpt-4.1",
            "--timeout",
            "30",
        )

    settings, urls, instruction = mock_create.call_args.args
    assert settings.model == "gpt-4.1"
    assert settings.request_timeout == 30
    assert settings.openai_api_key == "sk-test"
    assert urls == [VIDEO_URL]
    assert instruction == "Write a guide"
    assert mock_create.call_args.kwargs["keep_branding"] is True
    assert mock_create.call_args.kwargs["search_internet"] is False

    (saved,) = list(out_dir.iterdir())
    assert saved.name.endswith("-quantum-computing-for-beginners.md")
    out = capsys.readouterr().out
    assert "SUCCESS!" in out
    assert "Total cost:    $0.001" in out


def test_enhance_and_verify(monkeypatch, capsys, tmp_path, api_keys, fake_llm, sample_video):
    """Test the instruction is enhanced first, the article verified last, and both are costed."""
    mock_create = _create_article_mock(sample_video)

    with patch("yt2blog.__main__.create_article", new=mock_create):
        _run_cli(
            monkeypatch,
            VIDEO_URL,
            "--instruction",
            "Write about qubits",
            "--enhance",
            "--verify",
            "--out-dir",
            str(tmp_path),
        )

    assert "1200 word" in mock_create.call_args.args[2]
    assert [call["kind"] for call in fake_llm.calls] == ["enhance", "verify"]
    out = capsys.readouterr().out
    assert "Quality score: 8/10 (passed)" in out
    assert "Total tokens:  300" in out
    assert "- Instruction Enhancement x1" in out
    assert "- Refinement x1" in out
    assert "- Verification x1" in out


def test_generation_error_exits(monkeypatch, capsys, tmp_path, api_keys):
    """Test pipeline errors are printed and exit 1."""
    from yt2blog.errors import UpstreamError

    mock_create = AsyncMock(side_effect=UpstreamError("boom", status_code=503))

    with patch("yt2blog.__main__.create_article", new=mock_create):
        with pytest.raises(SystemExit) as exc_info:
            _run_cli(monkeypatch, VIDEO_URL, "--instruction", "Write a guide", "--out-dir", str(tmp_path))

    assert exc_info.value.code == 1
    assert "Error: Server error. Please try again later" in capsys.readouterr().out


def test_console_observer(capsys):
    """Test stage output, hiding pending unless verbose."""
    observer = ConsoleObserver()

    observer.update_progress("generation-academic", ProgressStatus.PENDING)
    observer.update_progress("generation-academic", ProgressStatus.COMPLETE)
    observer.on_token_usage(calculate_token_cost("gpt-4o", 30, 70, "Refinement"))

    out = capsys.readouterr().out
    assert "pending" not in out
    assert "generation-academic: complete" in out
    assert "Refinement" not in out
