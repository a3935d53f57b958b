"""Quote-aware splitting of untrusted command strings.

This is word splitting restricted to quoting: no globbing, no variable
expansion and no operators. Anything that is not a quote or whitespace is
literal text.
"""

from __future__ import annotations

import re

# C0 controls except TAB/LF/CR (those split like any other whitespace), plus DEL.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_QUOTES = ("'", '"')


def strip_control_chars(command: str) -> str:
    return _CONTROL_CHARS.sub("", command)


def tokenize(command: str) -> list[str]:
    """Split ``command`` into argv tokens.

    Single and double quotes group text (they do not nest). Inside a quoted
    span ``\\`` followed by the active quote character yields a literal quote.
    An empty result is returned as-is; callers decide what that means.

    >>> tokenize('log -5 "release v1.0"')
    ['log', '-5', 'release v1.0']
    """
    text = strip_control_chars(command)
    args: list[str] = []
    current: list[str] = []
    quote: str | None = None

    i = 0
    while i < len(text):
        ch = text[i]
        if quote is None and ch in _QUOTES:
            quote = ch
        elif quote is not None and ch == "\\" and text[i + 1 : i + 2] == quote:
            current.append(quote)
            i += 1
        elif quote is not None and ch == quote:
            quote = None
        elif quote is None and ch.isspace():
            if current:
                args.append("".join(current))
                current = []
        else:
            current.append(ch)
        i += 1

    if current:
        args.append("".join(current))
    return args
