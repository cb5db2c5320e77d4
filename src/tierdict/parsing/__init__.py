from .json_recovery import JsonRecovery, recover_json
from .response import normalize_modes, parse, parse_sections
from .sections import MODE_SEPARATOR

__all__ = [
    "JsonRecovery",
    "MODE_SEPARATOR",
    "normalize_modes",
    "parse",
    "parse_sections",
    "recover_json",
]
