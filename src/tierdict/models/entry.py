from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Tier(str, Enum):
    professional = "professional"
    intermediate = "intermediate"
    elementary = "elementary"


class RecoveryStrategy(str, Enum):
    """Which step of the parse cascade produced an entry."""

    whole = "whole"
    fenced = "fenced"
    bracket = "bracket"
    heuristic = "heuristic"


class TermExplanation(BaseModel):
    """`{"word": ..., "explanation": ...}` 形式の同義語・反義語。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    term: str = Field(alias="word")
    explanation: str = ""


class GlossedTerm(BaseModel):
    """中級モードの関連語彙（英語とその中国語訳）。"""

    model_config = ConfigDict(frozen=True)

    en: str
    zh: str = ""


class TierContent(BaseModel):
    """Fields shared by every tier.

    JSON 由来・ヒューリスティック由来のどちらもこの形に正規化される。
    フィールド名は snake_case、エイリアスは LLM に要求する JSON のキー名。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    definition: str = ""
    pronunciation: str = ""

    @classmethod
    def empty(cls, word: str) -> "TierContent":
        """Title-only placeholder used when a tier could not be recovered."""
        return cls(title=word)


class ProfessionalTier(TierContent):
    academic_usage: List[str] = Field(default_factory=list, alias="academicUsage")
    everyday_use: List[str] = Field(default_factory=list, alias="everydayUse")
    associated_vocabulary: List[str] = Field(default_factory=list, alias="associatedVocabulary")
    grammar: List[str] = Field(default_factory=list)
    collocations: Dict[str, str] = Field(default_factory=dict)
    synonyms: List[TermExplanation] = Field(default_factory=list)
    antonyms: List[TermExplanation] = Field(default_factory=list)


class IntermediateTier(TierContent):
    academic_usage: List[str] = Field(default_factory=list, alias="academicUsage")
    everyday_use: List[str] = Field(default_factory=list, alias="everydayUse")
    associated_vocabulary: List[GlossedTerm] = Field(default_factory=list, alias="associatedVocabulary")
    grammar: List[str] = Field(default_factory=list)
    collocations: Dict[str, str] = Field(default_factory=dict)
    synonyms: List[TermExplanation] = Field(default_factory=list)


class ElementaryTier(TierContent):
    usage: List[str] = Field(default_factory=list)
    related_words: str = Field(default="", alias="relatedWords")
    tips: str = ""
    similar_words: List[TermExplanation] = Field(default_factory=list, alias="similarWords")


class EntryTiers(BaseModel):
    """All three tiers. 欠落した tier は存在せず、常に3つ揃っている。"""

    model_config = ConfigDict(frozen=True)

    professional: ProfessionalTier
    intermediate: IntermediateTier
    elementary: ElementaryTier

    @classmethod
    def empty(cls, word: str) -> "EntryTiers":
        return cls(
            professional=ProfessionalTier.empty(word),
            intermediate=IntermediateTier.empty(word),
            elementary=ElementaryTier.empty(word),
        )


class VocabularyEntry(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "word": "converge",
                    "source": "whole",
                    "tiers": {
                        "professional": {
                            "title": "converge",
                            "definition": "To come together from different directions.",
                            "pronunciation": "/kənˈvɜːdʒ/",
                            "academicUsage": ["The estimates converge on a single value."],
                            "synonyms": [{"word": "meet", "explanation": "come together"}],
                        },
                        "intermediate": {"title": "converge", "definition": "汇合；趋同"},
                        "elementary": {"title": "converge", "definition": "走到一起"},
                    },
                }
            ]
        },
    )

    word: str
    tiers: EntryTiers
    source: RecoveryStrategy = RecoveryStrategy.heuristic

    @classmethod
    def empty(cls, word: str) -> "VocabularyEntry":
        return cls(word=word, tiers=EntryTiers.empty(word))
