import time
import uuid
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]
ErrorType = Literal["transport", "upstream_shape", "parse", "invalid_request", "internal"]

T = TypeVar("T")


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class CompletionOptions(BaseModel):
    """Per-call overrides. Fields left as None fall back to computed defaults."""
    model_config = ConfigDict(extra="forbid")

    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, gt=0)


class CompletionRequest(BaseModel):
    model: str = Field(min_length=1)
    messages: List[ChatMessage] = Field(min_length=1)
    temperature: float = Field(ge=0, le=2)
    max_tokens: int = Field(gt=0)
    stream: Literal[False] = False


class CompletionSuccess(BaseModel):
    success: Literal[True] = True
    content: str
    usage: Dict[str, Any] = Field(default_factory=dict)
    model: Optional[str] = None


class CompletionFailure(BaseModel):
    success: Literal[False] = False
    error: str
    error_type: ErrorType
    details: Optional[Any] = None


CompletionOutcome = Union[CompletionSuccess, CompletionFailure]


class TaskSuccess(BaseModel, Generic[T]):
    success: Literal[True] = True
    data: T
    raw_text: str


class TaskFailure(BaseModel, Generic[T]):
    success: Literal[False] = False
    error: str
    error_type: ErrorType
    fallback: T


# Union[TaskSuccess[T], TaskFailure[T]] with T bound per task
CVAnalysisResult = Union[TaskSuccess[Dict[str, Any]], TaskFailure[Dict[str, Any]]]
AnswerEvaluationResult = Union[TaskSuccess[Dict[str, Any]], TaskFailure[Dict[str, Any]]]
TextResult = Union[TaskSuccess[str], TaskFailure[str]]


class ConnectionStatus(BaseModel):
    connected: bool
    models: Optional[List[Any]] = None
    error: Optional[str] = None

    def advertised_ids(self) -> List[str]:
        """Advertised model ids, in server order."""
        ids = []
        for entry in self.models or []:
            model_id = entry.get("id") if isinstance(entry, dict) else None
            if isinstance(model_id, str) and model_id:
                ids.append(model_id)
        return ids


# OpenAI-compatible response bodies, as served by the dev server
def _now() -> int:
    return int(time.time())


class TokenUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @classmethod
    def estimate(cls, prompt: str, completion: str) -> "TokenUsage":
        """Rough count at 1.3 tokens per word"""
        prompt_tokens = int(len(prompt.split()) * 1.3)
        completion_tokens = int(len(completion.split()) * 1.3)
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )


class CompletionChoice(BaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: str = "stop"


class CompletionResponseBody(BaseModel):
    id: str = Field(default_factory=lambda: f"chatcmpl-{uuid.uuid4().hex[:8]}")
    object: Literal["chat.completion"] = "chat.completion"
    created: int = Field(default_factory=_now)
    model: str
    choices: List[CompletionChoice]
    usage: TokenUsage


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int = Field(default_factory=_now)
    owned_by: str = "local"


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: List[ModelCard]


# API request bodies
class CVAnalysisRequest(BaseModel):
    cv_text: str
    student_name: str = ""
    options: Optional[CompletionOptions] = None


class AnswerEvaluationRequest(BaseModel):
    question: str
    answer: str
    context: str = ""
    options: Optional[CompletionOptions] = None


class FollowUpRequest(BaseModel):
    previous_question: str
    previous_answer: str
    interview_type: str = "general"
    options: Optional[CompletionOptions] = None


class ReportSummaryRequest(BaseModel):
    cv_data: Dict[str, Any]
    analysis: Dict[str, Any]
    options: Optional[CompletionOptions] = None
