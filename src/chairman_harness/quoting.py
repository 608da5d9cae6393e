"""Argument quoting for human-readable command lines.

Only used to display commands in annotations and failure reports. Processes
are always launched with an argv vector, never a joined string.
"""

from __future__ import annotations

_NEEDS_QUOTING = (" ", '"', "$")

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "$": "\\$",
}

_UNESCAPES = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "$": "$",
}


def arg_quote(arg: str) -> str:
    """Format an argument for a shell command line.

    Wraps the argument in double quotes, escaping as needed, when it contains
    a space, a double quote or a dollar sign. Does not cover every shell edge
    case, so avoid it outside of diagnostics.
    """
    if not any(char in arg for char in _NEEDS_QUOTING):
        return arg
    return '"' + "".join(_ESCAPES.get(char, char) for char in arg) + '"'


def unquote(text: str) -> str:
    """Reverse :func:`arg_quote`.

    Text that is not wrapped in double quotes is returned unchanged.

    Raises:
        ValueError: If the quoted text ends in a dangling backslash or uses
            an escape that ``arg_quote`` never produces.
    """
    if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        return text

    body = text[1:-1]
    chars: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char != "\\":
            chars.append(char)
            index += 1
            continue
        if index + 1 >= len(body):
            raise ValueError(f"Dangling escape in {text!r}")
        escaped = body[index + 1]
        if escaped not in _UNESCAPES:
            raise ValueError(f"Unknown escape \\{escaped} in {text!r}")
        chars.append(_UNESCAPES[escaped])
        index += 2
    return "".join(chars)


def format_command(executable: str, arguments: list[str] | tuple[str, ...]) -> str:
    """Render an executable and its arguments with each argument quoted."""
    return " ".join([executable, *(arg_quote(arg) for arg in arguments)])


__all__ = ["arg_quote", "unquote", "format_command"]
