"""Step definitions for web search BDD tests."""

from pytest_bdd import given, parsers, scenarios, then

from yt2blog.errors import UpstreamError

scenarios("../features/web_search.feature")


# Given steps
@given("the web search fails")
def web_search_fails(context):
    """Make the research call fail."""
    context["llm"].fail("web_search", UpstreamError("Rate limit reached", status_code=429))


# Then steps
@then("the web search was requested before any draft")
def web_search_first(context):
    """Verify enrichment ran before drafting."""
    assert context["llm"].kinds[0] == "web_search"


@then(parsers.parse('every draft prompt contains "{text}"'))
def draft_prompts_contain(context, text):
    """Verify the enrichment reached every style."""
    calls = context["llm"].calls_of("draft:")
    assert len(calls) == 3
    assert all(text in call["prompt"] for call in calls)


@then(parsers.parse('no draft prompt contains "{text}"'))
def draft_prompts_omit(context, text):
    """Verify the enrichment was left out."""
    calls = context["llm"].calls_of("draft:")
    assert len(calls) == 3
    assert not any(text in call["prompt"] for call in calls)


@then(parsers.parse("the web search result has {count:d} sources"))
def web_search_source_count(context, count):
    """Verify the parsed sources."""
    assert context["web_search"] is not None
    assert len(context["web_search"].sources) == count


@then(parsers.parse('the web search prompt mentions "{topic}"'))
def web_search_topic(context, topic):
    """Verify the research topic."""
    (call,) = context["llm"].calls_of("web_search")
    assert topic in call["prompt"]


@then("no web search was requested")
def no_web_search(context):
    """Verify enrichment did not run."""
    assert context["llm"].calls_of("web_search") == []
