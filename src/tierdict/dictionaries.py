"""Named dictionary management on top of `DictionaryStore`.

辞書の作成・切替・削除・インポート/エクスポートと、辞書内の語の
追加（upsert）・削除・検索を扱う。状態はすべてストアに置き、
サービス自体はキャッシュを持たない。

想定内の失敗（名前の重複、最後の1冊の削除、存在しない語など）は
例外ではなく False / None で返し、HTTP 層が 400/404/409 に写像する。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from .config import settings
from .logging import logger
from .models.dictionary import Dictionary, WordRecord
from .models.entry import VocabularyEntry
from .store import DictionaryStore, store


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _collect_text(value: Any, out: List[str]) -> None:
    if isinstance(value, str):
        out.append(value)
    elif isinstance(value, dict):
        for v in value.values():
            _collect_text(v, out)
    elif isinstance(value, (list, tuple)):
        for v in value:
            _collect_text(v, out)


def entry_text(entry: VocabularyEntry) -> str:
    """All human readable strings of an entry, for substring search."""
    parts: List[str] = []
    tiers = entry.tiers.model_dump()
    _collect_text(tiers, parts)
    # collocations のラベルも検索対象に含める
    for tier in tiers.values():
        parts.extend(str(k) for k in (tier.get("collocations") or {}))
    return "\n".join(parts)


class DictionaryService:
    def __init__(self, dictionary_store: DictionaryStore, *, default_name: Optional[str] = None) -> None:
        self.store = dictionary_store
        self.default_name = default_name or settings.default_dictionary_name

    # --- helpers ---
    def _load(self, name: Optional[str] = None) -> Optional[Dictionary]:
        target = name or self.current_name()
        if not target:
            return None
        raw = self.store.get_dictionary(target)
        if raw is None:
            return None
        return Dictionary.model_validate(raw)

    def _save(self, dictionary: Dictionary) -> Dictionary:
        updated = dictionary.model_copy(update={"last_updated": _now()})
        self.store.save_dictionary(updated.name, updated.model_dump(by_alias=True, mode="json", exclude_none=True))
        return updated

    # --- dictionaries ---
    def initialize(self) -> str:
        """Ensure at least one dictionary exists and the current pointer is valid.

        初回起動時は既定名の辞書を作成する。現在の辞書が未設定か
        存在しない場合は作成順で先頭の辞書を現在の辞書にする。
        """
        names = self.store.list_names()
        if not names:
            self.create(self.default_name)
            names = self.store.list_names()
        current = self.store.get_current()
        if not current or current not in names:
            current = names[0]
            self.store.set_current(current)
        logger.info("dictionary_initialized", current=current, dictionaries=len(names))
        return current

    def list_names(self) -> List[str]:
        return self.store.list_names()

    def current_name(self) -> Optional[str]:
        return self.store.get_current()

    def create(self, name: str) -> bool:
        name = (name or "").strip()
        if not name or self.store.get_dictionary(name) is not None:
            return False
        self._save(Dictionary(name=name, words=[], last_updated=_now()))
        logger.info("dictionary_created", dictionary=name)
        return True

    def switch(self, name: str) -> bool:
        if self.store.get_dictionary(name) is None:
            return False
        self.store.set_current(name)
        logger.info("dictionary_switched", dictionary=name)
        return True

    def delete(self, name: str) -> bool:
        """Delete a dictionary. 最後の1冊は削除できない。現在の辞書なら先頭へ切り替える。"""
        names = self.store.list_names()
        if name not in names or len(names) <= 1:
            return False
        self.store.delete_dictionary(name)
        if self.current_name() == name:
            self.store.set_current(self.store.list_names()[0])
        logger.info("dictionary_deleted", dictionary=name, current=self.current_name())
        return True

    def clear(self, name: Optional[str] = None) -> bool:
        dictionary = self._load(name)
        if dictionary is None:
            return False
        self._save(dictionary.model_copy(update={"words": []}))
        logger.info("dictionary_cleared", dictionary=dictionary.name)
        return True

    def import_dictionary(self, name: str, words: Iterable[WordRecord]) -> Dictionary:
        """Store an exported payload under ``name`` (overwrite) and make it current."""
        records = list(words)
        imported = self._save(
            Dictionary(
                name=name,
                words=records,
                last_updated=_now(),
                imported=True,
                original_size=len(records),
            )
        )
        self.store.set_current(name)
        logger.info("dictionary_imported", dictionary=name, words=len(records))
        return imported

    def export(self, name: Optional[str] = None) -> Optional[Dictionary]:
        return self._load(name)

    # --- words ---
    def words(self, name: Optional[str] = None) -> List[WordRecord]:
        dictionary = self._load(name)
        return [] if dictionary is None else list(dictionary.words)

    def word_list(self, name: Optional[str] = None) -> List[str]:
        return [record.word for record in self.words(name)]

    def get_word(self, word: str, name: Optional[str] = None) -> Optional[WordRecord]:
        if not word:
            return None
        needle = word.lower()
        for record in self.words(name):
            if record.word.lower() == needle:
                return record
        return None

    def add_word(self, entry: VocabularyEntry, name: Optional[str] = None) -> Optional[WordRecord]:
        """Insert or replace the entry for ``entry.word`` (大文字小文字は区別しない)."""
        dictionary = self._load(name)
        if dictionary is None:
            return None
        now = _now()
        needle = entry.word.lower()
        words = list(dictionary.words)
        for index, record in enumerate(words):
            if record.word.lower() == needle:
                updated = record.model_copy(update={"entry": entry, "updated_at": now})
                words[index] = updated
                self._save(dictionary.model_copy(update={"words": words}))
                logger.info("word_updated", dictionary=dictionary.name, word=entry.word)
                return updated
        added = WordRecord(word=entry.word, entry=entry, created_at=now, updated_at=now)
        words.append(added)
        self._save(dictionary.model_copy(update={"words": words}))
        logger.info("word_added", dictionary=dictionary.name, word=entry.word)
        return added

    def delete_word(self, word: str, name: Optional[str] = None) -> bool:
        dictionary = self._load(name)
        if dictionary is None or not word:
            return False
        needle = word.lower()
        remaining = [r for r in dictionary.words if r.word.lower() != needle]
        if len(remaining) == len(dictionary.words):
            return False
        self._save(dictionary.model_copy(update={"words": remaining}))
        logger.info("word_deleted", dictionary=dictionary.name, word=word)
        return True

    def search(self, query: str, name: Optional[str] = None) -> List[WordRecord]:
        """Case-insensitive substring search over the word and its entry text."""
        if not query:
            return []
        needle = query.lower()
        return [
            record
            for record in self.words(name)
            if needle in record.word.lower() or needle in entry_text(record.entry).lower()
        ]


service = DictionaryService(store)
