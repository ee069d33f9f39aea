"""Derive default lookup-key fragments from field identifiers."""

from __future__ import annotations

__all__ = ["convert_field_name"]


def _is_upper_or_digit(char: str) -> bool:
    return char.isupper() or char.isdigit()


def convert_field_name(field_name: str) -> str:
    """Return the upper-snake-case key fragment for ``field_name``.

    Runs of capitals and digits are treated as acronyms and kept together, so
    ``APIVersion`` becomes ``API_VERSION`` and ``IPV4Address`` becomes
    ``IPV4_ADDRESS``. A digit run that follows a lowercase letter starts a new
    word (``Area51`` → ``AREA_51``). Identifiers already written in
    snake_case only have their case changed.
    """

    if not field_name:
        return ""
    if "_" in field_name and not any(char.isupper() for char in field_name):
        return field_name.upper()

    out: list[str] = []
    prev_is_upper = True
    for char in field_name:
        if _is_upper_or_digit(char):
            if not prev_is_upper and out[-1] != "_":
                out.append("_")
            out.append(char)
            prev_is_upper = True
            continue
        # Lowercase after an acronym run: the run's last capital starts this word.
        if char.islower() and prev_is_upper and len(out) >= 2 and _is_upper_or_digit(out[-2]):
            last = out.pop()
            out.extend(("_", last))
        out.append(char)
        prev_is_upper = False
    return "".join(out).upper()
