from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .entry import VocabularyEntry


class WordRecord(BaseModel):
    """辞書に保存される1語分のレコード。"""

    model_config = ConfigDict(populate_by_name=True)

    word: str
    entry: VocabularyEntry
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class Dictionary(BaseModel):
    """A named word collection as stored in the blob store.

    ストアには `{name, words, lastUpdated}` の JSON として保存される。
    インポートされた辞書には imported/originalSize が付く。
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    words: List[WordRecord] = Field(default_factory=list)
    last_updated: str = Field(alias="lastUpdated")
    imported: bool = False
    original_size: Optional[int] = Field(default=None, alias="originalSize")


class DictionaryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64, description="辞書名（1..64文字）")


class DictionarySwitchRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)


class DictionaryListResponse(BaseModel):
    names: List[str]
    current: Optional[str] = None


class DictionaryImportRequest(BaseModel):
    """Exported dictionary payload. words の各要素は WordRecord 互換であること。"""

    name: str = Field(min_length=1, max_length=64)
    words: List[WordRecord]


class WordListResponse(BaseModel):
    dictionary: str
    words: List[str]
    total: int
