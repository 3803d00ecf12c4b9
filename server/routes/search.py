"""Single-question search endpoint with a polite fallback answer."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from models.messages import Context
from models.outcomes import Answer
from server.dependencies import get_orchestrator
from server.schemas.requests import SearchRequest
from server.schemas.responses import SearchResponseDTO
from server.utils import run_until_disconnected
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Search"])

REFERENCE_NOT_FOUND_ANSWER = """## ⚠️ Referensi Tidak Ditemukan

Mohon maaf, saat ini kami belum dapat menemukan referensi dalil yang spesifik untuk pertanyaan tersebut, atau sistem sedang mengalami kendala teknis.

**Saran:**
- Coba gunakan kata kunci yang lebih umum.
- Periksa kembali ejaan pertanyaan Anda.
- Silakan coba beberapa saat lagi.

_Wallahu a'lam bish-shawab._"""


@router.post("/search", response_model=SearchResponseDTO)
async def search(request: Request, body: SearchRequest, orchestrator=Depends(get_orchestrator)):
    """Answer one syariah question; failures render as a "reference not found" answer."""
    if not body.query or not body.query.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Pertanyaan tidak boleh kosong",
        )

    outcome = await run_until_disconnected(
        request, orchestrator.answer_question(body.query.strip(), Context.SYARIAH)
    )
    if isinstance(outcome, Answer):
        return SearchResponseDTO(answer=outcome.text)

    logger.warning(
        "Search fell back to reference-not-found answer",
        extra={
            "extra_fields": {
                "request_id": getattr(request.state, "request_id", "unknown"),
                "outcome": type(outcome).__name__,
            }
        },
    )
    return SearchResponseDTO(answer=REFERENCE_NOT_FOUND_ANSWER)
