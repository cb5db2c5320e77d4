from typing import List

from fastapi import APIRouter, HTTPException, Query, Response

from ..dictionaries import service
from ..models.dictionary import (
    Dictionary,
    DictionaryCreateRequest,
    DictionaryImportRequest,
    DictionaryListResponse,
    DictionarySwitchRequest,
    WordListResponse,
    WordRecord,
)

router = APIRouter(tags=["dictionary"])


def _require(name: str) -> Dictionary:
    dictionary = service.export(name)
    if dictionary is None:
        raise HTTPException(status_code=404, detail="Dictionary not found")
    return dictionary


def _listing() -> DictionaryListResponse:
    return DictionaryListResponse(names=service.list_names(), current=service.current_name())


@router.get("", response_model=DictionaryListResponse, summary="辞書一覧")
def list_dictionaries() -> DictionaryListResponse:
    return _listing()


@router.post("", response_model=DictionaryListResponse, status_code=201, summary="辞書を作成")
def create_dictionary(req: DictionaryCreateRequest) -> DictionaryListResponse:
    if not service.create(req.name):
        raise HTTPException(status_code=409, detail="Dictionary already exists")
    return _listing()


@router.post("/switch", response_model=DictionaryListResponse, summary="現在の辞書を切り替え")
def switch_dictionary(req: DictionarySwitchRequest) -> DictionaryListResponse:
    if not service.switch(req.name):
        raise HTTPException(status_code=404, detail="Dictionary not found")
    return _listing()


@router.post("/import", response_model=DictionaryListResponse, summary="辞書をインポート")
def import_dictionary(req: DictionaryImportRequest) -> DictionaryListResponse:
    """Overwrite (or create) ``name`` with the payload and make it current."""
    service.import_dictionary(req.name, req.words)
    return _listing()


@router.delete("/{name}", response_model=DictionaryListResponse, summary="辞書を削除")
def delete_dictionary(name: str) -> DictionaryListResponse:
    """最後の1冊は削除できない（400）。現在の辞書を消した場合は先頭の辞書へ切り替わる。"""
    _require(name)
    if not service.delete(name):
        raise HTTPException(status_code=400, detail="The last dictionary cannot be deleted")
    return _listing()


@router.post("/{name}/clear", status_code=204, summary="辞書の語をすべて削除")
def clear_dictionary(name: str) -> Response:
    _require(name)
    service.clear(name)
    return Response(status_code=204)


@router.get("/{name}/export", response_model=Dictionary, summary="辞書をエクスポート")
def export_dictionary(name: str) -> Dictionary:
    return _require(name)


@router.get("/{name}/words", response_model=WordListResponse, summary="語の一覧")
def list_words(name: str) -> WordListResponse:
    _require(name)
    words = service.word_list(name)
    return WordListResponse(dictionary=name, words=words, total=len(words))


@router.get("/{name}/search", response_model=List[WordRecord], summary="語と解説を検索")
def search_words(name: str, q: str = Query(default="", max_length=200)) -> List[WordRecord]:
    _require(name)
    return service.search(q, name)


@router.get("/{name}/words/{word}", response_model=WordRecord, summary="語の詳細")
def get_word(name: str, word: str) -> WordRecord:
    _require(name)
    record = service.get_word(word, name)
    if record is None:
        raise HTTPException(status_code=404, detail="Word not found")
    return record


@router.delete("/{name}/words/{word}", status_code=204, summary="語を削除")
def delete_word(name: str, word: str) -> Response:
    _require(name)
    if not service.delete_word(word, name):
        raise HTTPException(status_code=404, detail="Word not found")
    return Response(status_code=204)
