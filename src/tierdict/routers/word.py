from fastapi import APIRouter, HTTPException

from ..dictionaries import service
from ..flows.vocabulary import VocabularyFlow
from ..logging import logger
from ..metrics import registry
from ..models.word import (
    EntryResponse,
    GenerateRequest,
    ParseRequest,
    RenderRequest,
    RenderResponse,
)
from ..parsing.response import parse
from ..providers.llm import LLMQueryError, get_llm_provider
from ..rendering import render, render_html
from .errors import llm_http_error

router = APIRouter(tags=["word"])


@router.post("/parse", response_model=EntryResponse, summary="LLM 応答テキストを解析")
async def parse_raw(req: ParseRequest) -> EntryResponse:
    """Parse a raw LLM answer into an entry and its tabbed document. 失敗はしない。"""
    entry = parse(req.raw, req.word)
    registry.record_strategy(entry.source.value)
    return EntryResponse(entry=entry, document=render(entry))


@router.post("/render", response_model=RenderResponse, summary="エントリを描画")
async def render_entry(req: RenderRequest) -> RenderResponse:
    document = render(req.entry)
    return RenderResponse(document=document, html=render_html(document))


@router.post("/generate", response_model=EntryResponse, summary="1語のエントリを LLM で生成")
async def generate(req: GenerateRequest) -> EntryResponse:
    """Generate one entry via the LLM and optionally save it.

    LLM の失敗は 502（タイムアウトは 504）で `{message, reason_code, diagnostics}` を返す。
    """
    target = req.dictionary or service.current_name()
    if req.save and (target is None or service.export(target) is None):
        raise HTTPException(status_code=404, detail="Dictionary not found")
    try:
        entry = await VocabularyFlow(get_llm_provider()).process_word(req.word)
    except LLMQueryError as exc:
        raise llm_http_error(exc, word=req.word) from exc
    saved = False
    if req.save:
        saved = service.add_word(entry, target) is not None
    logger.info("word_generated", word=req.word, strategy=entry.source.value, saved=saved)
    return EntryResponse(entry=entry, document=render(entry), saved=saved)
