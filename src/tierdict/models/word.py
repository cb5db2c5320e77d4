from typing import Optional

from pydantic import BaseModel, Field

from ..rendering import RenderedDocument
from .entry import VocabularyEntry


class ParseRequest(BaseModel):
    """LLM の生応答を解析してエントリ化する（LLM は呼ばない）。"""

    word: str = Field(min_length=1, max_length=64)
    raw: str = Field(default="", max_length=200_000, description="LLM が返したテキスト")


class RenderRequest(BaseModel):
    entry: VocabularyEntry


class GenerateRequest(BaseModel):
    word: str = Field(min_length=1, max_length=64)
    dictionary: Optional[str] = None
    save: bool = True


class EntryResponse(BaseModel):
    entry: VocabularyEntry
    document: RenderedDocument
    saved: bool = False


class RenderResponse(BaseModel):
    document: RenderedDocument
    html: str
