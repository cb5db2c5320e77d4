import pytest

from tierdict.dictionaries import DictionaryService, entry_text
from tierdict.models.entry import EntryTiers, ProfessionalTier, TermExplanation, VocabularyEntry
from tierdict.store import DictionaryStore


def _entry(word: str, definition: str = "", **professional) -> VocabularyEntry:
    tiers = EntryTiers.empty(word).model_copy(
        update={"professional": ProfessionalTier(title=word, definition=definition, **professional)}
    )
    return VocabularyEntry(word=word, tiers=tiers)


@pytest.fixture
def store(tmp_path):
    return DictionaryStore(db_path=str(tmp_path / "nested" / "dict.sqlite3"))


@pytest.fixture
def service(store):
    svc = DictionaryService(store, default_name="Default")
    svc.initialize()
    return svc


def test_store_round_trips_blobs_and_keeps_creation_order(store):
    store.save_dictionary("b", {"name": "b", "words": []})
    store.save_dictionary("a", {"name": "a", "words": [], "note": "汉字"})
    store.save_dictionary("b", {"name": "b", "words": [1]})
    assert store.list_names() == ["b", "a"]
    assert store.get_dictionary("a")["note"] == "汉字"
    assert store.get_dictionary("b")["words"] == [1]
    assert store.get_dictionary("missing") is None
    assert store.delete_dictionary("a") is True
    assert store.delete_dictionary("a") is False


def test_store_current_pointer(store):
    assert store.get_current() is None
    store.set_current("x")
    assert store.get_current() == "x"


def test_initialize_creates_default_dictionary_once(service, store):
    assert service.list_names() == ["Default"]
    assert service.current_name() == "Default"
    service.initialize()
    assert store.list_names() == ["Default"]


def test_initialize_repairs_dangling_current_pointer(service, store):
    service.create("Second")
    store.set_current("gone")
    assert service.initialize() == "Default"


def test_create_rejects_duplicates_and_blank_names(service):
    assert service.create("  Biology ") is True
    assert service.create("Biology") is False
    assert service.create("   ") is False
    assert service.list_names() == ["Default", "Biology"]


def test_switch_requires_existing_dictionary(service):
    service.create("Biology")
    assert service.switch("Biology") is True
    assert service.current_name() == "Biology"
    assert service.switch("Chemistry") is False
    assert service.current_name() == "Biology"


def test_last_dictionary_cannot_be_deleted(service):
    assert service.delete("Default") is False
    assert service.delete("missing") is False


def test_deleting_current_dictionary_switches_to_first(service):
    service.create("Biology")
    service.switch("Biology")
    assert service.delete("Biology") is True
    assert service.current_name() == "Default"


def test_add_word_upserts_case_insensitively(service):
    first = service.add_word(_entry("Nexus", "old"))
    second = service.add_word(_entry("nexus", "new"))
    assert service.word_list() == ["Nexus"]
    assert second.created_at == first.created_at
    assert service.get_word("NEXUS").entry.tiers.professional.definition == "new"
    assert service.add_word(_entry("x"), name="missing") is None


def test_delete_word_and_clear(service):
    service.add_word(_entry("alpha"))
    service.add_word(_entry("beta"))
    assert service.delete_word("ALPHA") is True
    assert service.delete_word("alpha") is False
    assert service.word_list() == ["beta"]
    assert service.clear() is True
    assert service.words() == []
    assert service.clear("missing") is False


def test_search_matches_word_and_entry_text(service):
    service.add_word(_entry("converge", "to come together"))
    service.add_word(
        _entry(
            "nexus",
            "a link",
            collocations={"causal": "causal nexus"},
            synonyms=[TermExplanation(term="junction", explanation="meeting point")],
        )
    )
    assert [r.word for r in service.search("TOGETHER")] == ["converge"]
    assert [r.word for r in service.search("meeting")] == ["nexus"]
    assert [r.word for r in service.search("con")] == ["converge"]
    assert service.search("") == []


def test_entry_text_includes_collocation_labels():
    text = entry_text(_entry("nexus", collocations={"adj + noun": "causal nexus"}))
    assert "adj + noun" in text
    assert "causal nexus" in text


def test_import_overwrites_and_becomes_current(service):
    service.add_word(_entry("alpha"))
    exported = service.export()
    imported = service.import_dictionary("Copy", exported.words)
    assert imported.imported is True
    assert imported.original_size == 1
    assert service.current_name() == "Copy"
    assert service.word_list("Copy") == ["alpha"]
    assert service.list_names() == ["Default", "Copy"]

    service.import_dictionary("Copy", [])
    assert service.word_list("Copy") == []


def test_export_of_unknown_dictionary_is_none(service):
    assert service.export("missing") is None
    assert service.words("missing") == []
