from __future__ import annotations

import re

_XPATH_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")
# normalize-space() only collapses these four characters.
_XPATH_SPACE = re.compile(r"[ \t\r\n]+")


def normalize_space(value: str | None) -> str:
    if not value:
        return ""
    return _XPATH_SPACE.sub(" ", str(value)).strip(" ")


def xpath_literal(value: str) -> str:
    """Quote ``value`` as an XPath 1.0 string literal.

    Double quotes are the house style. A value that itself contains a double
    quote switches to single quotes, and a value containing both kinds is
    assembled with ``concat()`` since XPath 1.0 has no escape sequences.
    """
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    pieces = value.split('"')
    quoted = [f'"{piece}"' for piece in pieces]
    return "concat(" + ", '\"', ".join(quoted) + ")"


def is_xpath_name(name: str) -> bool:
    return bool(_XPATH_NAME_PATTERN.fullmatch(name))


def step(tag: str, position: int) -> str:
    return f"/{tag}[{position}]"


def ordinal_suffix(number: int) -> str:
    value = number % 100
    if 11 <= value <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def ordinal(number: int) -> str:
    return f"{number}{ordinal_suffix(number)}"


def first_words(text: str, count: int) -> str:
    return " ".join(_XPATH_SPACE.sub(" ", text).strip(" ").split(" ")[:count])


def src_filename(value: str) -> str:
    tail = value.rstrip("/").split("/")[-1]
    return tail.split("?")[0].split("#")[0]
