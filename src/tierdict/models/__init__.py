from .common import ErrorDetail
from .dictionary import (
    Dictionary,
    DictionaryCreateRequest,
    DictionaryImportRequest,
    DictionaryListResponse,
    DictionarySwitchRequest,
    WordListResponse,
    WordRecord,
)
from .entry import (
    ElementaryTier,
    EntryTiers,
    GlossedTerm,
    IntermediateTier,
    ProfessionalTier,
    RecoveryStrategy,
    TermExplanation,
    Tier,
    TierContent,
    VocabularyEntry,
)

__all__ = [
    "Dictionary",
    "DictionaryCreateRequest",
    "DictionaryImportRequest",
    "DictionaryListResponse",
    "DictionarySwitchRequest",
    "ElementaryTier",
    "EntryTiers",
    "ErrorDetail",
    "GlossedTerm",
    "IntermediateTier",
    "ProfessionalTier",
    "RecoveryStrategy",
    "TermExplanation",
    "Tier",
    "TierContent",
    "VocabularyEntry",
    "WordListResponse",
    "WordRecord",
]
