"""Step definitions for article pipeline BDD tests."""

import pytest
from pytest_bdd import given, parsers, scenarios, then

from yt2blog.errors import UpstreamError
from yt2blog.prompts import count_words

scenarios("../features/article_pipeline.feature")


# Given steps
@given(parsers.parse('the "{label}" draft fails'))
def draft_fails(context, label):
    """Make one style's draft call fail."""
    context["llm"].fail(f"draft:{label}", UpstreamError("The model is overloaded", status_code=503))


# Then steps
@then("3 drafts and 3 critiques were requested before the refinement")
def drafts_and_critiques_before_refinement(context):
    """Verify the fan-out completed before the refiner ran."""
    kinds = context["llm"].kinds
    assert kinds[-1] == "refine"
    before = kinds[:-1]
    assert sorted(kind for kind in before if kind.startswith("draft:")) == [
        "draft:Academic Style",
        "draft:Creative Style",
        "draft:Technical Style",
    ]
    assert sorted(kind for kind in before if kind.startswith("critique:")) == [
        "critique:Academic Style",
        "critique:Creative Style",
        "critique:Technical Style",
    ]


@then(parsers.parse('the "{label}" draft used temperature {temperature:f}'))
def draft_temperature(context, label, temperature):
    """Verify a style's sampling temperature."""
    (call,) = context["llm"].calls_of(f"draft:{label}")
    assert call["temperature"] == pytest.approx(temperature)


@then(parsers.parse("every critique used temperature {temperature:f}"))
def critique_temperature(context, temperature):
    """Verify the critic's sampling temperature."""
    calls = context["llm"].calls_of("critique:")
    assert len(calls) == 3
    assert all(call["temperature"] == pytest.approx(temperature) for call in calls)


@then(parsers.parse("the refinement used temperature {temperature:f}"))
def refinement_temperature(context, temperature):
    """Verify the refiner's sampling temperature."""
    (call,) = context["llm"].calls_of("refine")
    assert call["temperature"] == pytest.approx(temperature)


@then("the refinement was never requested")
def refinement_never_requested(context):
    """Verify the refiner was not called."""
    assert context["llm"].calls_of("refine") == []


@then(parsers.parse("{count:d} token usage events were reported"))
def token_usage_event_count(context, count):
    """Verify one token event per LLM call."""
    assert len(context["tracker"].token_usages) == count


@then(parsers.parse("every token usage event has {input_tokens:d} input tokens and {output_tokens:d} output tokens"))
def token_usage_split(context, input_tokens, output_tokens):
    """Verify the estimated input/output split."""
    for usage in context["tracker"].token_usages:
        assert usage.input_tokens == input_tokens
        assert usage.output_tokens == output_tokens
        assert usage.total_tokens == input_tokens + output_tokens


@then("every critique prompt states the word count of its draft")
def critique_word_counts(context):
    """Verify critique prompts carry the draft's word count."""
    llm = context["llm"]
    for label in ("Academic Style", "Creative Style", "Technical Style"):
        draft = llm.default_reply(f"draft:{label}")
        (critique,) = llm.calls_of(f"critique:{label}")
        assert draft in critique["prompt"]
        assert f"WORD COUNT: {count_words(draft)} words" in critique["prompt"]
