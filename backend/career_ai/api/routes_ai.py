"""
AI endpoints backed by the local Llama service.
Failures are returned as result values with HTTP 200 so callers always get a usable fallback.
"""
from typing import Any, Dict, Union

from fastapi import APIRouter, Depends

from ..llama_service import LlamaService, get_llama_service
from ..schemas import (
    AnswerEvaluationRequest,
    CompletionFailure,
    CompletionSuccess,
    ConnectionStatus,
    CVAnalysisRequest,
    FollowUpRequest,
    ReportSummaryRequest,
    TaskFailure,
    TaskSuccess,
)

router = APIRouter(prefix="/ai", tags=["ai"])

JsonTaskResponse = Union[TaskSuccess[Dict[str, Any]], TaskFailure[Dict[str, Any]]]
TextTaskResponse = Union[TaskSuccess[str], TaskFailure[str]]


@router.get("/status", response_model=ConnectionStatus)
async def llama_status(service: LlamaService = Depends(get_llama_service)):
    return await service.check_connection()


@router.post("/test-connection", response_model=Union[CompletionSuccess, CompletionFailure])
async def llama_test_connection(service: LlamaService = Depends(get_llama_service)):
    return await service.test_connection()


@router.post("/cv-analysis", response_model=JsonTaskResponse)
async def cv_analysis(body: CVAnalysisRequest, service: LlamaService = Depends(get_llama_service)):
    return await service.analyze_cv(body.cv_text, body.student_name, options=body.options)


@router.post("/interview-evaluation", response_model=JsonTaskResponse)
async def interview_evaluation(body: AnswerEvaluationRequest, service: LlamaService = Depends(get_llama_service)):
    return await service.evaluate_interview_answer(body.question, body.answer, body.context, options=body.options)


@router.post("/follow-up-question", response_model=TextTaskResponse)
async def follow_up_question(body: FollowUpRequest, service: LlamaService = Depends(get_llama_service)):
    return await service.generate_follow_up_question(
        body.previous_question, body.previous_answer, body.interview_type, options=body.options
    )


@router.post("/report-summary", response_model=TextTaskResponse)
async def report_summary(body: ReportSummaryRequest, service: LlamaService = Depends(get_llama_service)):
    return await service.generate_report_summary(body.cv_data, body.analysis, options=body.options)
