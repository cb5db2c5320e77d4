from fastapi import APIRouter, HTTPException

from ..candidates import extract_candidates
from ..dictionaries import service
from ..flows.vocabulary import VocabularyFlow
from ..models.entry import VocabularyEntry
from ..models.text import (
    BatchReportResponse,
    CandidatesRequest,
    CandidatesResponse,
    ProcessTextRequest,
)
from ..providers.llm import LLMQueryError, get_llm_provider
from .errors import llm_http_error

router = APIRouter(tags=["text"])


@router.post("/candidates", response_model=CandidatesResponse, summary="本文から候補語を抽出")
async def candidates(req: CandidatesRequest) -> CandidatesResponse:
    """Extract ranked vocabulary candidates. refine=false なら LLM を呼ばない。"""
    llm = None
    if req.refine:
        try:
            llm = get_llm_provider()
        except LLMQueryError as exc:
            raise llm_http_error(exc) from exc
    return CandidatesResponse(candidates=await extract_candidates(req.text, llm))


@router.post("/process", response_model=BatchReportResponse, summary="本文の候補語を一括生成して保存")
async def process_text(req: ProcessTextRequest) -> BatchReportResponse:
    """Run the sequential batch: 候補抽出 → 既存語を除外 → 1語ずつ生成・保存。

    個々の語の失敗はレポートの failed に積み、バッチ全体は止めない。
    """
    target = req.dictionary or service.current_name()
    if req.auto_save and (target is None or service.export(target) is None):
        raise HTTPException(status_code=404, detail="Dictionary not found")
    try:
        llm = get_llm_provider()
    except LLMQueryError as exc:
        raise llm_http_error(exc) from exc

    def _save(entry: VocabularyEntry) -> None:
        if service.add_word(entry, target) is None:
            raise LookupError(f"Dictionary not found: {target}")

    flow = VocabularyFlow(llm)
    report = await flow.process_text(
        req.text,
        existing=service.word_list(target) if req.auto_save else (),
        on_entry=_save if req.auto_save else None,
    )
    return BatchReportResponse(dictionary=target if req.auto_save else None, **report.as_dict())
