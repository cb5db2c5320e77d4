from .vocabulary import BatchReport, VocabularyFlow, WordFailure

__all__ = ["BatchReport", "VocabularyFlow", "WordFailure"]
