from typing import List, Optional

from pydantic import BaseModel, Field


class CandidatesRequest(BaseModel):
    text: str = Field(default="", max_length=200_000, description="候補語を抽出する本文")
    refine: bool = Field(default=True, description="LLM による精選を行うか")


class CandidatesResponse(BaseModel):
    candidates: List[str]


class ProcessTextRequest(BaseModel):
    """本文から候補語を抽出し、各語のエントリを生成して辞書に保存する。"""

    text: str = Field(min_length=1, max_length=200_000)
    dictionary: Optional[str] = Field(default=None, description="保存先。省略時は現在の辞書")
    auto_save: bool = True


class WordFailureItem(BaseModel):
    word: str
    reason_code: str
    message: str


class BatchReportResponse(BaseModel):
    dictionary: Optional[str] = None
    candidates: List[str] = Field(default_factory=list)
    processed: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    failed: List[WordFailureItem] = Field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0
