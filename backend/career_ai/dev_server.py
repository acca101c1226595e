"""
Local development server - OpenAI-compatible API with canned answers
Stands in for the Llama server when no model is available
Run with: uvicorn career_ai.dev_server:app --port 1234
"""
import json

from fastapi import FastAPI, HTTPException

from .schemas import (
    ChatMessage,
    CompletionChoice,
    CompletionRequest,
    CompletionResponseBody,
    ModelCard,
    ModelList,
    TokenUsage,
)

app = FastAPI(title="Local Llama Dev Server", description="OpenAI-compatible API returning canned answers")

AVAILABLE_MODELS = [
    "meta-llama-3.1-8b-instruct",
    "llama-3.2-3b-instruct",
]

CANNED_CV_ANALYSIS = {
    "strengths": ["Solid programming fundamentals", "Team projects during studies"],
    "technical_skills": ["Python", "SQL", "Git"],
    "soft_skills": ["Communication", "Teamwork"],
    "improvement_areas": ["Limited professional experience"],
    "experience_summary": "Internship and academic projects in software development.",
    "education_summary": "Degree in Computer Engineering in progress.",
    "highlights": ["Final-year project with a real client"],
}

CANNED_EVALUATION = {
    "score": 8,
    "feedback": "Clear and well-structured answer.",
    "strengths": ["Concrete example"],
    "improvement_areas": ["Quantify the results"],
    "suggestions": ["Use the STAR method"],
    "better_example": "In my last project I reduced build times by 30% by ...",
}

CANNED_FOLLOW_UP = "What challenges did you face and how did you overcome them?"


@app.get("/")
async def root():
    return {"message": "Local Llama Dev Server - OpenAI Compatible API", "status": "running"}


@app.get("/v1/models")
async def list_models() -> ModelList:
    """List available models (OpenAI compatible)"""
    return ModelList(data=[ModelCard(id=model_id) for model_id in AVAILABLE_MODELS])


@app.post("/v1/chat/completions")
async def chat_completions(request: CompletionRequest) -> CompletionResponseBody:
    """Create chat completion (OpenAI compatible)"""
    user_message = next((m.content for m in reversed(request.messages) if m.role == "user"), None)
    if not user_message:
        raise HTTPException(400, "No user message found")

    system_message = next((m.content for m in request.messages if m.role == "system"), "")
    reply = canned_reply(system_message, user_message, request.model)
    return CompletionResponseBody(
        model=request.model,
        choices=[CompletionChoice(message=ChatMessage(role="assistant", content=reply))],
        usage=TokenUsage.estimate(user_message, reply),
    )


def canned_reply(system_message: str, user_message: str, model: str) -> str:
    """Deterministic answer chosen from the shape of the prompt."""
    system = system_message.lower()
    if "cv analysis" in system:
        return json.dumps(CANNED_CV_ANALYSIS, indent=2)
    if "evaluate answers" in system:
        return json.dumps(CANNED_EVALUATION, indent=2)
    if "follow-up" in system:
        return f"  {CANNED_FOLLOW_UP}\n"
    if '"ok"' in user_message.lower():
        return "OK"
    return f"This is a mock response from the local development server for model {model}."


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=1234)
