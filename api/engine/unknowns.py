from typing import Any, Dict, List, Optional

DECK_OPTION_UNRECOGNIZED = "DECK_OPTION_UNRECOGNIZED"
ACCESS_FILTER_NOOP = "ACCESS_FILTER_NOOP"

Unknown = Dict[str, Any]


def make_unknown(
    code: str,
    input_value: str,
    message: str,
    reason: str,
    suggestions: Optional[List[str]] = None,
) -> Unknown:
    return {
        "code": code,
        "input": input_value,
        "message": message,
        "reason": reason,
        "suggestions": list(suggestions or []),
    }


def add_unknown(
    unknowns: Optional[List[Unknown]],
    code: str,
    input_value: str,
    message: str,
    reason: str,
    suggestions: Optional[List[str]] = None,
) -> None:
    # None means the caller is not collecting diagnostics.
    if unknowns is None:
        return
    unknowns.append(make_unknown(code, input_value, message, reason, suggestions))


def sort_unknowns(unknowns: List[Unknown]) -> List[Unknown]:
    return sorted(unknowns, key=lambda u: (u.get("code", ""), u.get("input", ""), u.get("reason", "")))
