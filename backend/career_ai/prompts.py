"""
Prompt templates for the student career tasks.

Each task has a pure ``render_*`` function returning the messages and sampling
options to send, and a fallback builder returning the value callers get when
the model is unreachable or its answer cannot be used.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .schemas import ChatMessage, CompletionOptions

CV_EXCERPT_LENGTH = 500

CV_ANALYSIS_KEYS = (
    "strengths",
    "technical_skills",
    "soft_skills",
    "improvement_areas",
    "experience_summary",
    "education_summary",
    "highlights",
)

DEFAULT_FOLLOW_UP_QUESTION = "Could you give me a specific example of that situation?"
DEFAULT_REPORT_SUMMARY = "CV analysis report generated automatically."


@dataclass(frozen=True)
class RenderedPrompt:
    messages: List[ChatMessage]
    options: CompletionOptions

    def with_overrides(self, overrides: Optional[CompletionOptions]) -> "RenderedPrompt":
        """Explicitly set override fields win over the template's options."""
        if overrides is None:
            return self
        merged = self.options.model_copy(update=overrides.model_dump(exclude_none=True))
        return RenderedPrompt(messages=self.messages, options=merged)


def _conversation(system_prompt: str, user_prompt: str) -> List[ChatMessage]:
    return [
        ChatMessage(role="system", content=system_prompt),
        ChatMessage(role="user", content=user_prompt),
    ]


# CV analysis

CV_ANALYSIS_SYSTEM = (
    "You are an expert human-resources analyst specialised in CV analysis. "
    "You always answer with valid JSON."
)


def render_cv_analysis(cv_text: str, student_name: str = "") -> RenderedPrompt:
    prompt = f"""
You are an expert in curriculum vitae analysis. Analyse the following CV and extract structured information.

CV of {student_name}:
{cv_text}

Provide a detailed analysis in JSON format with:
1. **strengths**: Array of the main strengths identified
2. **technical_skills**: Array of technical skills found
3. **soft_skills**: Array of soft skills identified
4. **improvement_areas**: Array of areas that could be improved
5. **experience_summary**: Summary of the work experience
6. **education_summary**: Summary of the academic background
7. **highlights**: Most remarkable aspects of the profile

Answer ONLY with the JSON, without additional text."""
    return RenderedPrompt(
        messages=_conversation(CV_ANALYSIS_SYSTEM, prompt),
        options=CompletionOptions(temperature=0.3, max_tokens=1500),
    )


def cv_analysis_fallback(cv_text: str) -> Dict[str, Any]:
    """CV-shaped record built from the raw text, tagged as unparsed."""
    excerpt = cv_text[:CV_EXCERPT_LENGTH] + "..."
    return {
        "strengths": [],
        "technical_skills": [],
        "soft_skills": [],
        "improvement_areas": [],
        "experience_summary": "",
        "education_summary": "",
        "highlights": [],
        "unparsed": True,
        "fallback_content": excerpt,
    }


# Interview answer evaluation

ANSWER_EVALUATION_SYSTEM = (
    "You are an expert HR interviewer. You evaluate answers constructively and objectively. "
    "You always answer with valid JSON."
)


def render_answer_evaluation(question: str, answer: str, context: str = "") -> RenderedPrompt:
    context_line = f"**Context:** {context}" if context else ""
    prompt = f"""
You are an expert human-resources interviewer. Evaluate this job interview answer.

**Question:** {question}
**Candidate answer:** {answer}
{context_line}

Provide an evaluation in JSON format with:
1. **score**: Number from 1 to 10 (10 = excellent)
2. **feedback**: Specific, constructive feedback
3. **strengths**: Array of positive aspects identified
4. **improvement_areas**: Array of aspects to improve
5. **suggestions**: Array of specific tips to improve
6. **better_example**: Example of how the answer could be better

Be constructive and specific in your comments.
Answer ONLY with the JSON, without additional text."""
    return RenderedPrompt(
        messages=_conversation(ANSWER_EVALUATION_SYSTEM, prompt),
        options=CompletionOptions(temperature=0.4, max_tokens=1000),
    )


def answer_evaluation_fallback() -> Dict[str, Any]:
    return {
        "score": 7,
        "feedback": "Answer recorded. Evaluation pending.",
        "strengths": ["Active participation"],
        "improvement_areas": ["Evaluation pending"],
        "suggestions": ["Keep practising"],
        "better_example": "",
    }


# Follow-up question

FOLLOW_UP_SYSTEM = (
    "You are a professional interviewer skilled at asking smart, relevant follow-up questions."
)


def render_follow_up_question(
    previous_question: str, previous_answer: str, interview_type: str = "general"
) -> RenderedPrompt:
    prompt = f"""
You are an expert interviewer. Based on the previous exchange, generate a smart follow-up question.

**Previous question:** {previous_question}
**Candidate answer:** {previous_answer}
**Interview type:** {interview_type}

Generate a follow-up question that:
1. Is relevant to the answer given
2. Digs deeper into important aspects
3. Assesses specific skills
4. Is appropriate for a workplace context

Answer ONLY with the question, without additional text."""
    return RenderedPrompt(
        messages=_conversation(FOLLOW_UP_SYSTEM, prompt),
        options=CompletionOptions(temperature=0.6, max_tokens=200),
    )


# Report summary

REPORT_SUMMARY_SYSTEM = (
    "You are a human-resources consultant experienced in writing professional talent analysis reports."
)


def render_report_summary(cv_data: Dict[str, Any], analysis: Dict[str, Any]) -> RenderedPrompt:
    prompt = f"""
Write a professional executive summary based on the CV analysis.

**CV data:** {json.dumps(cv_data, indent=2, ensure_ascii=False, default=str)}
**Analysis performed:** {json.dumps(analysis, indent=2, ensure_ascii=False, default=str)}

Write an executive summary of 2-3 paragraphs covering:
1. General professional profile
2. Main strengths and competencies
3. Development recommendations

The tone must be professional and constructive."""
    return RenderedPrompt(
        messages=_conversation(REPORT_SUMMARY_SYSTEM, prompt),
        options=CompletionOptions(temperature=0.5, max_tokens=800),
    )


# Diagnostics

CONNECTION_TEST_PROMPT = 'Reply with "OK" if you can read me correctly.'


def render_connection_test() -> RenderedPrompt:
    return RenderedPrompt(
        messages=[ChatMessage(role="user", content=CONNECTION_TEST_PROMPT)],
        options=CompletionOptions(temperature=0.1, max_tokens=50),
    )
