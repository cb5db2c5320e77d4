from .llm import (
    ConnectionState,
    ConnectionStatus,
    LLMQueryError,
    OllamaLLM,
    get_llm_provider,
    reset_llm_provider,
)

__all__ = [
    "ConnectionState",
    "ConnectionStatus",
    "LLMQueryError",
    "OllamaLLM",
    "get_llm_provider",
    "reset_llm_provider",
]
