"""OpenAI chat access for YT2Blog.

Every LLM call in the package goes through ChatClient.complete(), which:

1. builds a two-message prompt (system + human) with LangChain
2. runs it against ChatOpenAI under an explicit deadline
3. turns provider errors into the YT2Blog error taxonomy
4. reports token usage and cost to the progress reporter
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import openai
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from .config import DEFAULT_MAX_RETRIES, DEFAULT_REQUEST_TIMEOUT, LLM_MODEL_NAME
from .errors import InvalidApiKeyError, UpstreamError, UpstreamTimeoutError
from .metrics import record_llm_call, record_token_usage
from .models import TokenCost
from .pricing import calculate_token_cost, estimate_token_split
from .progress import PipelineObserver

logger = logging.getLogger(__name__)


def get_llm(
    api_key: str,
    temperature: float = 0.7,
    model: str = LLM_MODEL_NAME,
    max_tokens: Optional[int] = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> ChatOpenAI:
    """Get a configured LLM instance.

    Args:
        api_key: OpenAI API key for this call.
        temperature: The temperature setting for the LLM.
        model: Model name. Defaults to OPENAI_MODEL or "gpt-4o".
        max_tokens: Optional completion token cap.
        timeout: Per-request HTTP timeout in seconds.
        max_retries: Retries performed by the OpenAI client.

    Returns:
        Configured ChatOpenAI instance.
    """
    kwargs: Dict[str, Any] = {
        "model": model,
        "temperature": temperature,
        "api_key": api_key,
        "timeout": timeout,
        "max_retries": max_retries,
    }
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    return ChatOpenAI(**kwargs)


def extract_token_usage(message: Any) -> Tuple[int, int, int]:
    """Read token counts from a chat model response.

    Looks at LangChain's ``usage_metadata`` first and falls back to the raw
    ``token_usage``/``usage`` block in ``response_metadata`` (accepting both
    input/output and prompt/completion naming).

    Returns:
        Tuple of (input_tokens, output_tokens, total_tokens), with the 30/70
        estimate applied when only a total is available.
    """
    usage = getattr(message, "usage_metadata", None) or {}
    input_tokens = usage.get("input_tokens") or 0
    output_tokens = usage.get("output_tokens") or 0
    total_tokens = usage.get("total_tokens") or 0

    if not (input_tokens or output_tokens or total_tokens):
        metadata = getattr(message, "response_metadata", None) or {}
        raw = metadata.get("token_usage") or metadata.get("usage") or {}
        input_tokens = raw.get("input_tokens") or raw.get("prompt_tokens") or 0
        output_tokens = raw.get("output_tokens") or raw.get("completion_tokens") or 0
        total_tokens = raw.get("total_tokens") or 0

    input_tokens, output_tokens = estimate_token_split(input_tokens, output_tokens, total_tokens)
    return input_tokens, output_tokens, total_tokens or input_tokens + output_tokens


def _upstream_message(error: openai.APIStatusError, action: str) -> str:
    """Pull the provider's error message out of an API error, if it sent one."""
    body = error.body
    if isinstance(body, dict):
        detail = body.get("error", body)
        if isinstance(detail, dict) and detail.get("message"):
            return detail["message"]
        if body.get("message"):
            return body["message"]
    return f"Failed to {action}"


class ChatClient:
    """Issues chat completions with one API key and shared call settings.

    Attributes:
        model: Model name used for every call.
        request_timeout: Deadline in seconds for a single call.
        max_retries: Retries handed to the OpenAI client.
        reporter: Optional observer that receives a TokenCost per call.
    """

    def __init__(
        self,
        api_key: str,
        model: str = LLM_MODEL_NAME,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        reporter: Optional[PipelineObserver] = None,
    ):
        self._api_key = api_key
        self.model = model
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.reporter = reporter

    def __repr__(self) -> str:
        return f"ChatClient(model={self.model!r}, request_timeout={self.request_timeout})"

    async def complete(
        self,
        system_prompt: str,
        prompt: str,
        temperature: float,
        operation: str,
        action: str = "generate a response",
        max_tokens: Optional[int] = None,
    ) -> str:
        """Run one chat completion and return the reply text.

        Args:
            system_prompt: System role content.
            prompt: User message content.
            temperature: Sampling temperature.
            operation: Label used for token accounting, e.g. "Critique: Creative Style".
            action: Verb phrase for the generic error message ("Failed to <action>").
            max_tokens: Optional completion token cap.

        Returns:
            The content of the first choice.

        Raises:
            InvalidApiKeyError: The provider rejected the key.
            UpstreamTimeoutError: No answer before request_timeout.
            UpstreamError: Any other provider failure or a malformed response.
        """
        llm = get_llm(
            self._api_key,
            temperature=temperature,
            model=self.model,
            max_tokens=max_tokens,
            timeout=self.request_timeout,
            max_retries=self.max_retries,
        )
        chat_prompt = ChatPromptTemplate.from_messages(
            [
                ("system", system_prompt),
                ("human", "{prompt}"),
            ]
        )
        chain = chat_prompt | llm

        try:
            response = await asyncio.wait_for(chain.ainvoke({"prompt": prompt}), timeout=self.request_timeout)
        except asyncio.TimeoutError as e:
            record_llm_call(operation, "timeout")
            raise UpstreamTimeoutError(
                f"Failed to {action}: no response within {self.request_timeout:g} seconds"
            ) from e
        except openai.AuthenticationError as e:
            record_llm_call(operation, "error")
            raise InvalidApiKeyError() from e
        except openai.APIStatusError as e:
            record_llm_call(operation, "error")
            raise UpstreamError(_upstream_message(e, action), status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            record_llm_call(operation, "error")
            raise UpstreamError(f"Failed to {action}: {e}") from e
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            # Raised by the client when the body lacks choices[0].message or carries an error
            record_llm_call(operation, "error")
            raise UpstreamError(f"Failed to {action}: malformed response from the LLM API") from e
        except openai.OpenAIError as e:
            record_llm_call(operation, "error")
            raise UpstreamError(f"Failed to {action}: {e}") from e

        content = getattr(response, "content", None)
        if not isinstance(content, str):
            record_llm_call(operation, "error")
            raise UpstreamError(f"Failed to {action}: malformed response from the LLM API")

        record_llm_call(operation, "success")
        self._report_usage(response, operation)
        return content

    def _report_usage(self, response: Any, operation: str) -> Optional[TokenCost]:
        input_tokens, output_tokens, total_tokens = extract_token_usage(response)
        if not total_tokens:
            return None

        metadata = getattr(response, "response_metadata", None) or {}
        model = metadata.get("model_name") or metadata.get("model") or self.model

        cost = calculate_token_cost(model, input_tokens, output_tokens, operation)
        logger.debug(f"{operation}: {input_tokens} input / {output_tokens} output tokens")
        record_token_usage(cost)
        if self.reporter:
            self.reporter.on_token_usage(cost)
        return cost


async def validate_api_key(api_key: Optional[str], model: str = LLM_MODEL_NAME) -> bool:
    """Check an OpenAI API key with a lightweight call.

    Args:
        api_key: The key to check.
        model: Model to ping.

    Returns:
        True if the provider accepted the key.
    """
    if not api_key:
        return False

    llm = get_llm(api_key, model=model, max_tokens=5, timeout=30)
    try:
        await llm.ainvoke("Hello world")
    except openai.OpenAIError as e:
        logger.warning(f"OpenAI API key validation failed: {type(e).__name__}")
        return False
    return True
