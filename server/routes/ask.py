"""Conversation endpoint backed by the answer orchestrator."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from models.messages import Message
from models.outcomes import Answer
from server.dependencies import get_orchestrator
from server.schemas.requests import AskRequest
from server.schemas.responses import AskResponseDTO
from server.utils import run_until_disconnected, status_for_outcome, validate_and_trim_conversation
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Ask"])


@router.post("/ask", response_model=AskResponseDTO)
async def ask(request: Request, body: AskRequest, orchestrator=Depends(get_orchestrator)):
    """
    Answer a conversation under the syariah or history context.

    Returns {success: true, content} on an answer. Exhausted pools map to 502,
    configuration problems to 500 and invalid conversations to 400.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    conversation = validate_and_trim_conversation(body.messages)

    if any(item.role == "system" for item in conversation):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="System messages are not accepted",
        )

    messages = [Message(role=item.role, content=item.content) for item in conversation]
    outcome = await run_until_disconnected(request, orchestrator.answer(messages, body.context))

    dto = AskResponseDTO.from_outcome(outcome)
    logger.info(
        "Ask request completed",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "context": body.context,
                "outcome": type(outcome).__name__,
                "model": outcome.model if isinstance(outcome, Answer) else None,
                "attempt_count": len(outcome.attempts),
            }
        },
    )
    return JSONResponse(
        status_code=status_for_outcome(outcome), content=dto.model_dump(exclude_none=True)
    )
