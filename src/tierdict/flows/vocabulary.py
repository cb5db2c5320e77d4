from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, Optional

import anyio

from ..candidates import extract_candidates
from ..config import PromptStyle, settings
from ..logging import logger
from ..metrics import registry
from ..models.entry import VocabularyEntry
from ..parsing.response import parse
from ..prompts import entry_prompt
from ..providers.llm import LLMQueryError


EntryCallback = Callable[[VocabularyEntry], Awaitable[None] | None]


@dataclass
class WordFailure:
    word: str
    reason_code: str
    message: str


@dataclass
class BatchReport:
    """Outcome of one text-to-dictionary batch. 失敗語は理由付きで残す。"""

    candidates: List[str] = field(default_factory=list)
    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[WordFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.processed)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    def as_dict(self) -> dict[str, Any]:
        return {
            "candidates": list(self.candidates),
            "processed": list(self.processed),
            "skipped": list(self.skipped),
            "failed": [f.__dict__ for f in self.failed],
            "success_count": self.success_count,
            "failure_count": self.failure_count,
        }


class VocabularyFlow:
    """Generate dictionary entries for words via the LLM.

    1語ごとに「プロンプト生成 → LLM 問い合わせ → 応答解析」を行う。
    バッチは逐次処理で、リクエスト間に ``request_delay_ms`` だけ待つ
    （ローカル LLM を詰まらせないため並列化しない）。
    """

    def __init__(
        self,
        llm: Any,
        *,
        prompt_style: PromptStyle | str | None = None,
        request_delay_ms: int | None = None,
    ) -> None:
        self.llm = llm
        self.prompt_style = PromptStyle(prompt_style or settings.prompt_style)
        self.request_delay_ms = (
            settings.llm_request_delay_ms if request_delay_ms is None else request_delay_ms
        )

    async def process_word(self, word: str) -> VocabularyEntry:
        """Query the LLM for one word and parse the answer. LLM 失敗は LLMQueryError。"""
        prompt = entry_prompt(word, self.prompt_style)
        logger.info("vocabulary_prompt_built", word=word, prompt_style=self.prompt_style.value)
        raw = await self.llm.query(prompt)
        if not isinstance(raw, str) or not raw.strip():
            raise LLMQueryError(
                f"Empty LLM response for word: {word}",
                reason_code="EMPTY_RESPONSE",
                diagnostics={"word": word},
            )
        logger.info("vocabulary_output_received", word=word, output_chars=len(raw))
        entry = parse(raw, word)
        registry.record_strategy(entry.source.value)
        return entry

    async def process_words(
        self,
        words: Iterable[str],
        *,
        existing: Iterable[str] = (),
        on_entry: Optional[EntryCallback] = None,
        report: Optional[BatchReport] = None,
    ) -> BatchReport:
        """Process words one by one; 既存語はスキップ、失敗語はログに残して次へ。"""
        report = report or BatchReport()
        known = {w.lower() for w in existing}
        pending: List[str] = []
        for word in words:
            if word.lower() in known:
                report.skipped.append(word)
            else:
                pending.append(word)

        for index, word in enumerate(pending):
            if index > 0 and self.request_delay_ms > 0:
                await anyio.sleep(self.request_delay_ms / 1000.0)
            try:
                entry = await self.process_word(word)
            except LLMQueryError as exc:
                logger.warning(
                    "batch_word_failed",
                    word=word,
                    reason_code=exc.reason_code,
                    error=str(exc),
                )
                report.failed.append(WordFailure(word=word, reason_code=exc.reason_code, message=str(exc)))
                continue
            if on_entry is not None:
                try:
                    result = on_entry(entry)
                    if result is not None:
                        await result
                except Exception as exc:
                    logger.warning(
                        "batch_word_save_failed",
                        word=word,
                        error_type=type(exc).__name__,
                        error=str(exc),
                    )
                    report.failed.append(
                        WordFailure(word=word, reason_code="SAVE_FAILED", message=str(exc))
                    )
                    continue
            report.processed.append(word)
            logger.info("batch_word_done", word=word, position=index + 1, total=len(pending))

        logger.info(
            "batch_complete",
            processed=report.success_count,
            failed=report.failure_count,
            skipped=len(report.skipped),
        )
        return report

    async def process_text(
        self,
        text: str,
        *,
        existing: Iterable[str] = (),
        on_entry: Optional[EntryCallback] = None,
    ) -> BatchReport:
        """Extract candidates from ``text`` and generate entries for the new ones."""
        candidates = await extract_candidates(text, self.llm)
        logger.info("batch_candidates_extracted", count=len(candidates))
        report = BatchReport(candidates=list(candidates))
        return await self.process_words(candidates, existing=existing, on_entry=on_entry, report=report)
