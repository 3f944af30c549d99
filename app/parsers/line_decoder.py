"""
app/parsers/line_decoder.py

Quote-aware decoding of one comma-separated feed line.
"""

from __future__ import annotations

QUOTE = '"'
SEPARATOR = ","


def decode_line(line: str) -> list[str]:
    """
    Split one feed line into trimmed field strings.

    Commas inside a quoted section are literal content, and a doubled quote
    inside a quoted section emits one literal quote. An unterminated quote is
    closed implicitly at end of line. An empty line yields ``[""]``.
    """

    if line.endswith("\r"):
        line = line[:-1]

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        if char == QUOTE:
            if in_quotes and index + 1 < length and line[index + 1] == QUOTE:
                current.append(QUOTE)
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == SEPARATOR and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1

    fields.append("".join(current).strip())
    return fields
