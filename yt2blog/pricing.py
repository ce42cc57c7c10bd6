"""Token usage accounting and cost calculation."""

import logging
import math
from typing import Dict, Iterable, Optional, Tuple

from .config import DEFAULT_PRICING_MODEL, ESTIMATED_INPUT_SHARE, PRICING
from .models import TokenCost, TokenUsageSummary, UsageDetail

logger = logging.getLogger(__name__)


def estimate_token_split(input_tokens: int, output_tokens: int, total_tokens: int) -> Tuple[int, int]:
    """Fill in input/output token counts when only a total was reported.

    Args:
        input_tokens: Reported input tokens (0 if missing).
        output_tokens: Reported output tokens (0 if missing).
        total_tokens: Reported total tokens (0 if missing).

    Returns:
        Tuple of (input_tokens, output_tokens). When both counts are zero but
        the total is not, the total is split 30/70 between input and output.
    """
    if total_tokens > 0 and input_tokens == 0 and output_tokens == 0:
        input_tokens = math.floor(total_tokens * ESTIMATED_INPUT_SHARE + 0.5)
        output_tokens = total_tokens - input_tokens
    return input_tokens, output_tokens


def calculate_token_cost(
    model: Optional[str],
    input_tokens: Optional[int],
    output_tokens: Optional[int],
    operation: str = "api-call",
) -> TokenCost:
    """Calculate the cost of one LLM call.

    Args:
        model: Model name reported by the API. Unknown models are priced as gpt-4o.
        input_tokens: Number of input tokens.
        output_tokens: Number of output tokens.
        operation: Label for the call, e.g. "Generation: Academic Style".

    Returns:
        TokenCost with per-direction and total costs.
    """
    actual_model = model if model and model in PRICING else DEFAULT_PRICING_MODEL
    pricing = PRICING[actual_model]

    safe_input = int(input_tokens or 0)
    safe_output = int(output_tokens or 0)

    input_cost = (safe_input / 1_000_000) * pricing["input"]
    output_cost = (safe_output / 1_000_000) * pricing["output"]

    logger.debug(
        f"Cost for {operation}: model={actual_model} input={safe_input} output={safe_output} "
        f"cost=${input_cost + output_cost:.6f}"
    )

    return TokenCost(
        model=actual_model,
        operation=operation,
        input_tokens=safe_input,
        output_tokens=safe_output,
        total_tokens=safe_input + safe_output,
        input_cost=input_cost,
        output_cost=output_cost,
        total_cost=input_cost + output_cost,
    )


def format_cost(cost: Optional[float]) -> str:
    """Format a USD cost with three decimals.

    Any non-zero cost below a tenth of a cent is shown as $0.001.
    """
    if cost is None or math.isnan(cost):
        return "$0.000"
    if cost < 0.001:
        return "$0.000" if cost == 0 else "$0.001"
    return f"${cost:.3f}"


def summarize_token_usage(usages: Iterable[TokenCost]) -> TokenUsageSummary:
    """Summarize token usage and cost across many LLM calls.

    Args:
        usages: TokenCost records, in the order they were reported.

    Returns:
        TokenUsageSummary with totals, per-model and per-operation counts.
    """
    summary = TokenUsageSummary()
    model_counts: Dict[str, int] = {}
    operation_counts: Dict[str, int] = {}

    for index, usage in enumerate(usages, 1):
        summary.total_input_tokens += usage.input_tokens
        summary.total_output_tokens += usage.output_tokens
        summary.total_cost += usage.total_cost

        model_counts[usage.model] = model_counts.get(usage.model, 0) + 1
        operation_counts[usage.operation] = operation_counts.get(usage.operation, 0) + 1

        summary.detailed_usage.append(
            UsageDetail(
                id=index,
                operation=usage.operation,
                model=usage.model,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                total_tokens=usage.input_tokens + usage.output_tokens,
                cost=usage.total_cost,
            )
        )

    summary.total_tokens = summary.total_input_tokens + summary.total_output_tokens
    summary.model_counts = model_counts
    summary.operation_counts = operation_counts
    return summary
