"""Shared fixtures for the YT2Blog tests."""

import asyncio
import re
from typing import Any, Dict, List, Optional

import pytest
from langchain_core.messages import AIMessage, HumanMessage
from langchain_core.runnables import RunnableLambda

from yt2blog.config import STYLE_CONFIGS
from yt2blog.models import VideoContent
from yt2blog.prompts import (
    CRITIC_SYSTEM_PROMPT,
    ENHANCER_SYSTEM_PROMPT,
    REFINER_SYSTEM_PROMPT,
    RESEARCH_ASSISTANT_SYSTEM_PROMPT,
    VERIFIER_SYSTEM_PROMPT,
)

_CRITIQUE_STYLE_PATTERN = re.compile(r'written in a "(.+?)" style')

FINAL_ARTICLE = """# Quantum Computing for Beginners

Quantum computers use qubits, which can hold a blend of zero and one at the same time.

## Why it matters

They promise faster answers to a narrow set of hard problems.
"""

WEB_SEARCH_REPLY = """- Qubits can be superconducting circuits or trapped ions.
- Error correction remains the main engineering hurdle.

Sources:
1. Quantum Primer - https://example.com/primer
2. IBM Quantum Roadmap - https://example.com/roadmap
"""


class FakeChatBackend:
    """Stands in for ChatOpenAI and records every call made through it.

    Each call is classified by its system prompt into a kind such as
    "draft:Academic Style", "critique:Creative Style", "refine",
    "web_search", "verify", "enhance" or "ping".
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.replies: Dict[str, str] = {}
        self.failures: Dict[str, BaseException] = {}
        self.delays: Dict[str, float] = {}
        self.token_usage: Optional[Dict[str, int]] = {"total_tokens": 100}
        self.model_name = "gpt-4o"

    def reply(self, kind: str, text: str) -> None:
        self.replies[kind] = text

    def fail(self, kind: str, error: BaseException) -> None:
        self.failures[kind] = error

    def delay(self, kind: str, seconds: float) -> None:
        self.delays[kind] = seconds

    def calls_of(self, prefix: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["kind"].startswith(prefix)]

    @property
    def kinds(self) -> List[str]:
        return [call["kind"] for call in self.calls]

    @staticmethod
    def classify(system: str, prompt: str) -> str:
        for style in STYLE_CONFIGS:
            if system == style.system_prompt:
                return f"draft:{style.label}"
        if system == CRITIC_SYSTEM_PROMPT:
            match = _CRITIQUE_STYLE_PATTERN.search(prompt)
            return f"critique:{match.group(1) if match else 'unknown'}"
        if system == REFINER_SYSTEM_PROMPT:
            return "refine"
        if system == RESEARCH_ASSISTANT_SYSTEM_PROMPT:
            return "web_search"
        if system == VERIFIER_SYSTEM_PROMPT:
            return "verify"
        if system == ENHANCER_SYSTEM_PROMPT:
            return "enhance"
        return "ping"

    def default_reply(self, kind: str) -> str:
        if kind.startswith("draft:"):
            label = kind.split(":", 1)[1]
            return f"# {label} draft\n\nA draft about qubits written in the {label.lower()}."
        if kind.startswith("critique:"):
            return "Solid structure, but the introduction is too long."
        if kind == "refine":
            return FINAL_ARTICLE
        if kind == "web_search":
            return WEB_SEARCH_REPLY
        if kind == "verify":
            return "Adherence: 8/10\nQuality: 7/10\nStructure: 9/10\nStyle: 8/10\nImpact: 8/10"
        if kind == "enhance":
            return "Write a 1200 word beginner's guide to quantum computing with three worked examples."
        return "Hi"

    def get_llm(self, api_key, temperature=0.7, model="gpt-4o", max_tokens=None, timeout=None, max_retries=None):
        """Drop-in replacement for yt2blog.llm.get_llm."""

        async def respond(prompt_value):
            if hasattr(prompt_value, "to_messages"):
                messages = prompt_value.to_messages()
            else:
                messages = [HumanMessage(content=str(prompt_value))]
            system = next((m.content for m in messages if m.type == "system"), "")
            prompt = next((m.content for m in messages if m.type == "human"), "")
            kind = self.classify(system, prompt)
            self.calls.append(
                {
                    "kind": kind,
                    "system": system,
                    "prompt": prompt,
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                    "model": model,
                    "api_key": api_key,
                }
            )

            if kind in self.delays:
                await asyncio.sleep(self.delays[kind])
            if kind in self.failures:
                raise self.failures[kind]

            metadata: Dict[str, Any] = {"model_name": self.model_name}
            if self.token_usage is not None:
                metadata["token_usage"] = dict(self.token_usage)
            return AIMessage(content=self.replies.get(kind, self.default_reply(kind)), response_metadata=metadata)

        return RunnableLambda(respond)


@pytest.fixture
def fake_llm(monkeypatch):
    """Route every LLM call through a FakeChatBackend."""
    backend = FakeChatBackend()
    monkeypatch.setattr("yt2blog.llm.get_llm", backend.get_llm)
    return backend


@pytest.fixture
def sample_video():
    """One scraped video."""
    return VideoContent(
        video_id="dQw4w9WgXcQ",
        url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        title="Quantum Computing Explained",
        description="An introduction to qubits and superposition.",
        transcript="Today we talk about qubits and why they matter.",
        channel_title="Science Channel",
        published_at="2024-01-15T10:00:00Z",
    )


@pytest.fixture
def second_video():
    """Another scraped video."""
    return VideoContent(
        video_id="9bZkp7q19f0",
        url="https://youtu.be/9bZkp7q19f0",
        title="Error Correction in Practice",
        description="How quantum error correction works.",
        transcript="Error correction is the hardest part.",
        channel_title="Lab Notes",
    )


@pytest.fixture
def sample_content(sample_video):
    """Video content keyed by URL, as the pipeline expects it."""
    return {sample_video.url: sample_video}


@pytest.fixture
def youtube_video_response():
    """Mock YouTube Data API videos response."""
    return {
        "items": [
            {
                "id": "dQw4w9WgXcQ",
                "snippet": {
                    "title": "Quantum Computing Explained",
                    "description": "An introduction to qubits and superposition.",
                    "channelTitle": "Science Channel",
                    "publishedAt": "2024-01-15T10:00:00Z",
                },
                "contentDetails": {"duration": "PT12M30S"},
            }
        ]
    }


@pytest.fixture
def youtube_captions_response():
    """Mock YouTube Data API captions response."""
    return {
        "items": [
            {"id": "caption-de", "snippet": {"language": "de"}},
            {"id": "caption-en", "snippet": {"language": "en"}},
        ]
    }
