"""
Llama Service Module for student career services
Handles all calls to the local inference server: CV analysis, interview
answer evaluation, follow-up questions and report summaries
"""
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Sequence, Union

import httpx
from pydantic import ValidationError

from . import prompts
from .config import LlamaSettings, get_settings
from .errors import LlamaServiceError, TransportError, UpstreamShapeError
from .interpret import interpret_json, interpret_text
from .schemas import (
    AnswerEvaluationResult,
    ChatMessage,
    CompletionFailure,
    CompletionOptions,
    CompletionOutcome,
    CompletionRequest,
    CompletionSuccess,
    ConnectionStatus,
    CVAnalysisResult,
    TaskFailure,
    TextResult,
)

logger = logging.getLogger(__name__)

MODELS_PATH = "/v1/models"
CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

MessageLike = Union[ChatMessage, Dict[str, Any]]


class LlamaService:
    """Client for a local OpenAI-compatible Llama server"""

    def __init__(self, settings: Optional[LlamaSettings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.base_url = self.settings.base_url
        self.timeout = self.settings.timeout
        self.fallback_model = self.settings.fallback_model
        # Tests and the dev server plug in here (MockTransport / ASGITransport)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """One HTTP round-trip returning the decoded JSON body."""
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Server responded {e.response.status_code} for {path}",
                details=_error_body(e.response),
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamShapeError(f"Response from {path} is not valid JSON", details=response.text) from e

    async def check_connection(self) -> ConnectionStatus:
        """Query the model listing endpoint. Never raises."""
        try:
            body = await self._request("GET", MODELS_PATH)
        except LlamaServiceError as e:
            logger.warning(f"Could not reach Llama server at {self.base_url}: {e.message}")
            return ConnectionStatus(connected=False, error=e.message)
        except Exception as e:
            logger.exception("Unexpected error probing Llama server")
            return ConnectionStatus(connected=False, error=str(e) or type(e).__name__)
        return ConnectionStatus(connected=True, models=_model_entries(body))

    async def resolve_model(self, explicit_model: Optional[str] = None) -> str:
        """Explicit model wins; else the first advertised model; else the configured fallback."""
        if explicit_model:
            return explicit_model
        status = await self.check_connection()
        if status.connected:
            advertised = status.advertised_ids()
            if advertised:
                return advertised[0]
        logger.debug(f"No advertised model, using fallback {self.fallback_model}")
        return self.fallback_model

    async def chat_completion(
        self, messages: Sequence[MessageLike], options: Optional[CompletionOptions] = None
    ) -> CompletionOutcome:
        """
        Single chat completion against the local server.

        Options left unset default to temperature 0.7 and 1000 max tokens; a
        missing model is resolved from the server's model listing. Every
        failure comes back as a CompletionFailure value.
        """
        options = options or CompletionOptions()
        try:
            chat_messages = [ChatMessage.model_validate(m) for m in messages or []]
        except ValidationError as e:
            logger.error(f"Rejected chat completion with invalid messages: {e}")
            return CompletionFailure(error=f"Invalid chat messages: {e}", error_type="invalid_request")
        if not chat_messages:
            return CompletionFailure(error="messages required", error_type="invalid_request")

        try:
            model = await self.resolve_model(options.model)
            request = CompletionRequest(
                model=model,
                messages=chat_messages,
                temperature=DEFAULT_TEMPERATURE if options.temperature is None else options.temperature,
                max_tokens=DEFAULT_MAX_TOKENS if options.max_tokens is None else options.max_tokens,
            )
            logger.debug(f"Chat completion: model={model} messages={len(chat_messages)}")
            body = await self._request("POST", CHAT_COMPLETIONS_PATH, request.model_dump())
            return _completion_from_body(body, model)
        except LlamaServiceError as e:
            logger.error(f"Chat completion failed: {e.message}")
            return e.to_failure()
        except Exception as e:
            logger.exception("Unexpected error in chat completion")
            return CompletionFailure(error=str(e) or type(e).__name__, error_type="internal")

    async def _run_task(
        self,
        task: str,
        render: Callable[[], prompts.RenderedPrompt],
        options: Optional[CompletionOptions],
        fallback: Any,
        expects_json: bool,
    ):
        try:
            prompt = render().with_overrides(options)
            outcome = await self.chat_completion(prompt.messages, prompt.options)
            if expects_json:
                return interpret_json(task, outcome, fallback)
            return interpret_text(task, outcome, fallback)
        except Exception as e:
            logger.exception(f"{task} failed")
            return TaskFailure[type(fallback)](error=str(e) or type(e).__name__, error_type="internal", fallback=fallback)

    async def analyze_cv(
        self, cv_text: str, student_name: str = "", options: Optional[CompletionOptions] = None
    ) -> CVAnalysisResult:
        """Structured analysis of a student's CV"""
        return await self._run_task(
            "CV analysis",
            lambda: prompts.render_cv_analysis(cv_text, student_name),
            options,
            prompts.cv_analysis_fallback(cv_text),
            expects_json=True,
        )

    async def evaluate_interview_answer(
        self, question: str, answer: str, context: str = "", options: Optional[CompletionOptions] = None
    ) -> AnswerEvaluationResult:
        """Score and feedback for one interview answer"""
        return await self._run_task(
            "Interview answer evaluation",
            lambda: prompts.render_answer_evaluation(question, answer, context),
            options,
            prompts.answer_evaluation_fallback(),
            expects_json=True,
        )

    async def generate_follow_up_question(
        self,
        previous_question: str,
        previous_answer: str,
        interview_type: str = "general",
        options: Optional[CompletionOptions] = None,
    ) -> TextResult:
        return await self._run_task(
            "Follow-up question generation",
            lambda: prompts.render_follow_up_question(previous_question, previous_answer, interview_type),
            options,
            prompts.DEFAULT_FOLLOW_UP_QUESTION,
            expects_json=False,
        )

    async def generate_report_summary(
        self, cv_data: Dict[str, Any], analysis: Dict[str, Any], options: Optional[CompletionOptions] = None
    ) -> TextResult:
        return await self._run_task(
            "Report summary generation",
            lambda: prompts.render_report_summary(cv_data, analysis),
            options,
            prompts.DEFAULT_REPORT_SUMMARY,
            expects_json=False,
        )

    async def test_connection(self) -> CompletionOutcome:
        """Health check: ask the model to answer "OK" and report the outcome"""
        logger.info(f"Testing connection with Llama server at {self.base_url}")
        prompt = prompts.render_connection_test()
        result = await self.chat_completion(prompt.messages, prompt.options)
        if result.success:
            logger.info(f"Llama connection OK: {result.content}")
        else:
            logger.error(f"Llama connection failed: {result.error}")
        return result


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _model_entries(body: Any) -> list:
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return body["data"]
    return []


def _completion_from_body(body: Any, requested_model: str) -> CompletionSuccess:
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamShapeError("Response has no choices[0].message.content", details=body) from e
    if not isinstance(content, str):
        raise UpstreamShapeError("Response message content is not text", details=body)

    usage = body.get("usage")
    reported_model = body.get("model")
    return CompletionSuccess(
        content=content,
        usage=usage if isinstance(usage, dict) else {},
        model=reported_model if isinstance(reported_model, str) and reported_model else requested_model,
    )


@lru_cache(maxsize=1)
def get_llama_service() -> LlamaService:
    """Process-wide service built from environment settings"""
    return LlamaService(get_settings())
