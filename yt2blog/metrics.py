"""Prometheus metrics and OpenTelemetry tracing for YT2Blog.

This module provides observability instrumentation for the generation pipeline:
- Prometheus metrics for LLM calls, token spend, stage latency and API traffic
- OpenTelemetry tracing for following one generation through its stages

Usage:
    from yt2blog.metrics import get_tracer, track_stage

    with track_stage("final-generation"):
        ...

    # Scrape the /metrics endpoint on the API server
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from prometheus_client import Counter, Histogram, Info

from .models import TokenCost

logger = logging.getLogger(__name__)

# ============================================================================
# Prometheus Metrics Definitions
# ============================================================================

# --- Generation Metrics ---
generations_total = Counter(
    "yt2blog_generations_total",
    "Total number of article generations",
    ["status"],
)

generation_duration_seconds = Histogram(
    "yt2blog_generation_duration_seconds",
    "End-to-end article generation duration in seconds",
    ["status"],
    buckets=(5, 10, 30, 60, 120, 180, 300, 600),
)

stage_duration_seconds = Histogram(
    "yt2blog_stage_duration_seconds",
    "Pipeline stage duration in seconds",
    ["stage", "status"],
    buckets=(0.5, 1, 2.5, 5, 10, 30, 60, 120, 300),
)

# --- LLM Metrics ---
llm_calls_total = Counter(
    "yt2blog_llm_calls_total",
    "Total number of LLM calls",
    ["operation", "outcome"],
)

llm_tokens_total = Counter(
    "yt2blog_llm_tokens_total",
    "Total number of LLM tokens consumed",
    ["model", "direction"],  # input, output
)

llm_cost_usd_total = Counter(
    "yt2blog_llm_cost_usd_total",
    "Estimated LLM spend in USD",
    ["model"],
)

# --- API Metrics ---
api_requests_total = Counter(
    "yt2blog_api_requests_total",
    "Total number of API requests",
    ["method", "endpoint", "status_code"],
)

api_request_duration_seconds = Histogram(
    "yt2blog_api_request_duration_seconds",
    "API request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 60.0, 120.0, 300.0),
)

# --- System Info ---
system_info = Info(
    "yt2blog_system",
    "YT2Blog system information",
)


# ============================================================================
# OpenTelemetry Tracing
# ============================================================================


def get_tracer(name: str = "yt2blog") -> Any:
    """Get an OpenTelemetry tracer.

    Without a configured SDK, OpenTelemetry hands back a no-op tracer, so
    spans cost nothing unless an exporter is installed by the host.

    Args:
        name: The name of the tracer (typically the module name).
    """
    return trace.get_tracer(name)


# ============================================================================
# Instrumentation Helpers
# ============================================================================


def _operation_kind(operation: str) -> str:
    """Reduce an operation label like 'Generation: Academic Style' to 'generation'."""
    return operation.split(":", 1)[0].strip().lower().replace(" ", "_") or "api_call"


@contextmanager
def track_stage(stage: str, **attributes: Any) -> Generator[Any, None, None]:
    """Context manager to time and trace one pipeline stage.

    Args:
        stage: The progress stage key.
        **attributes: Extra span attributes.

    Yields:
        The active span.
    """
    tracer = get_tracer()
    start_time = time.time()
    span_attributes = {"pipeline.stage": stage}
    span_attributes.update(attributes)

    with tracer.start_as_current_span(f"pipeline.{stage}", attributes=span_attributes) as span:
        try:
            yield span
        except BaseException:
            stage_duration_seconds.labels(stage=stage, status="error").observe(time.time() - start_time)
            raise
        stage_duration_seconds.labels(stage=stage, status="complete").observe(time.time() - start_time)


@contextmanager
def track_generation() -> Generator[None, None, None]:
    """Context manager to record the outcome of a whole generation."""
    start_time = time.time()
    try:
        yield
    except BaseException as e:
        status = "cancelled" if isinstance(e, asyncio.CancelledError) else "failed"
        generations_total.labels(status=status).inc()
        generation_duration_seconds.labels(status=status).observe(time.time() - start_time)
        raise
    generations_total.labels(status="completed").inc()
    generation_duration_seconds.labels(status="completed").observe(time.time() - start_time)


def record_llm_call(operation: str, outcome: str) -> None:
    """Record an LLM call.

    Args:
        operation: Operation label of the call.
        outcome: "success", "error" or "timeout".
    """
    llm_calls_total.labels(operation=_operation_kind(operation), outcome=outcome).inc()


def record_token_usage(cost: TokenCost) -> None:
    """Record the tokens and spend of one LLM call."""
    llm_tokens_total.labels(model=cost.model, direction="input").inc(cost.input_tokens)
    llm_tokens_total.labels(model=cost.model, direction="output").inc(cost.output_tokens)
    llm_cost_usd_total.labels(model=cost.model).inc(cost.total_cost)


def track_api_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    """Record API request metrics.

    Args:
        method: HTTP method.
        endpoint: Request endpoint.
        status_code: Response status code.
        duration: Request duration in seconds.
    """
    api_requests_total.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
    api_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def set_system_info(version: str = "0.1.0", **kwargs: Any) -> None:
    """Set system information.

    Args:
        version: The application version.
        **kwargs: Additional info to include.
    """
    info = {"version": version}
    info.update(kwargs)
    system_info.info(info)


__all__ = [
    "generations_total",
    "generation_duration_seconds",
    "stage_duration_seconds",
    "llm_calls_total",
    "llm_tokens_total",
    "llm_cost_usd_total",
    "api_requests_total",
    "api_request_duration_seconds",
    "system_info",
    "get_tracer",
    "track_stage",
    "track_generation",
    "record_llm_call",
    "record_token_usage",
    "track_api_request",
    "set_system_info",
]
