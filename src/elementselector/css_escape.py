from __future__ import annotations

import re

_CSS_SAFE_IDENT_PATTERN = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")


def css_escape(value: str) -> str:
    """Escape ``value`` for use as a CSS identifier.

    Output is identical to the CSSOM ``CSS.escape`` algorithm, so selectors
    built here behave the same whether they are evaluated by a browser or by
    an in-memory snapshot.
    """
    if is_css_safe_identifier(value):
        return value
    length = len(value)
    if length == 1 and value == "-":
        return "\\-"

    starts_with_dash = length > 0 and value[0] == "-"
    escaped: list[str] = []
    for index, char in enumerate(value):
        codepoint = ord(char)
        if codepoint == 0x00:
            escaped.append("\ufffd")
        elif 0x01 <= codepoint <= 0x1F or codepoint == 0x7F:
            escaped.append(f"\\{codepoint:x} ")
        elif (index == 0 or (starts_with_dash and index == 1)) and char.isascii() and char.isdigit():
            escaped.append(f"\\{codepoint:x} ")
        elif codepoint >= 0x80 or char in ("-", "_") or (char.isascii() and char.isalnum()):
            escaped.append(char)
        else:
            escaped.append(f"\\{char}")
    return "".join(escaped)


def escape_attribute_value(value: str) -> str:
    escaped: list[str] = []
    for char in value:
        codepoint = ord(char)
        if char in ("\\", '"'):
            escaped.append(f"\\{char}")
        elif codepoint == 0x00:
            escaped.append("\ufffd")
        elif 0x01 <= codepoint <= 0x1F or codepoint == 0x7F:
            escaped.append(f"\\{codepoint:x} ")
        else:
            escaped.append(char)
    return "".join(escaped)


def is_css_safe_identifier(value: str) -> bool:
    return bool(_CSS_SAFE_IDENT_PATTERN.fullmatch(value))
