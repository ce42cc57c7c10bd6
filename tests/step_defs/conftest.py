"""Step definitions shared by the pipeline feature files."""

import asyncio

import pytest
from pytest_bdd import given, parsers, then, when

from yt2blog.errors import InputValidationError, UpstreamError
from yt2blog.models import GenerationRequest, ProgressStatus
from yt2blog.pipeline import ArticlePipeline
from yt2blog.progress import ProgressReporter, ProgressTracker

DEFAULT_INSTRUCTION = "Write a 500 word beginner's guide"


@pytest.fixture
def context():
    """Shared test context."""
    return {}


def run_pipeline(context, instruction: str, search_internet: bool = False) -> None:
    """Run the pipeline against the stubbed chat model, storing the outcome in context."""
    tracker = ProgressTracker()
    pipeline = ArticlePipeline(reporter=ProgressReporter(tracker))
    request = GenerationRequest(
        api_key="test-openai-key",
        content=context["content"],
        instruction=instruction,
        search_internet=search_internet,
    )
    context["tracker"] = tracker
    context["article"], context["web_search"] = asyncio.run(pipeline.generate_with_context(request))


# Given steps
@given("a stubbed chat model")
def stubbed_chat_model(context, fake_llm):
    """Route LLM calls through the fake backend."""
    context["llm"] = fake_llm


@given(parsers.re(r"content from (?P<count>\d+) videos?"), converters={"count": int})
def content_from_videos(context, count, sample_video, second_video):
    """Provide scraped video content."""
    videos = [sample_video, second_video][:count]
    context["content"] = {video.url: video for video in videos}


# When steps
@when(parsers.re(r'I generate an article with the instruction "(?P<instruction>[^"]*)"'))
def generate_article(context, instruction):
    """Generate an article."""
    run_pipeline(context, instruction)


@when(parsers.re(r'I try to generate an article with the instruction "(?P<instruction>[^"]*)"'))
def try_generate_article(context, instruction):
    """Generate an article, capturing any error."""
    try:
        run_pipeline(context, instruction)
    except (InputValidationError, UpstreamError) as e:
        context["error"] = e


@when("I generate an article with web search enabled")
def generate_article_with_web_search(context):
    """Generate an article with web-search enrichment."""
    run_pipeline(context, DEFAULT_INSTRUCTION, search_internet=True)


# Then steps
@then("the article is not empty")
def article_not_empty(context):
    """Verify an article was produced."""
    assert context["article"].strip()


@then(parsers.parse("the chat model was called {count:d} times"))
def chat_model_call_count(context, count):
    """Verify the number of LLM calls."""
    assert len(context["llm"].calls) == count


@then(parsers.parse('the stage "{stage}" went through "{statuses}"'))
def stage_history(context, stage, statuses):
    """Verify the full status history of a stage."""
    expected = [ProgressStatus(status.strip()) for status in statuses.split(",")]
    assert context["tracker"].history(stage) == expected


@then(parsers.parse('the stage "{stage}" ended in "{status}"'))
def stage_final_status(context, stage, status):
    """Verify the last status of a stage."""
    assert context["tracker"].status(stage) == ProgressStatus(status)


@then(parsers.parse('the stage "{stage}" was never reported'))
def stage_never_reported(context, stage):
    """Verify a stage received no events."""
    assert context["tracker"].history(stage) == []


@then("the generation fails with an upstream error")
def generation_fails_upstream(context):
    """Verify the generation failed at the LLM boundary."""
    assert isinstance(context.get("error"), UpstreamError)


@then("the generation fails with a validation error")
def generation_fails_validation(context):
    """Verify the request was rejected up front."""
    assert isinstance(context.get("error"), InputValidationError)
