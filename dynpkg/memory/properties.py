"""
Reader and writer for Java-style .properties text.

Only the subset the build files use is supported: '#'/'!' comments,
'=', ':' or whitespace separators, backslash escapes and line continuations.
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPES = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f", "\\": "\\\\"}
_SPECIALS = "=:#!"


class PropertiesSyntaxError(ValueError):
    def __init__(self, lineno: int, message: str):
        self.lineno = lineno
        super().__init__(f"line {lineno}: {message}")


def _ends_with_continuation(line: str) -> bool:
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    pending: Optional[str] = None
    start = 0
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.lstrip(" \t\f")
        if pending is None:
            if not line or line[0] in "#!":
                continue
            start = lineno
        if _ends_with_continuation(line):
            pending = (pending or "") + line[:-1]
            continue
        yield start, (pending or "") + line
        pending = None
    if pending is not None:
        yield start, pending


def _unescape(text: str, lineno: int) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= len(text):
            break
        ch = text[i]
        if ch == "u":
            digits = text[i + 1:i + 5]
            if len(digits) != 4 or any(c not in "0123456789abcdefABCDEF" for c in digits):
                raise PropertiesSyntaxError(lineno, f"malformed \\u escape: \\u{digits}")
            out.append(chr(int(digits, 16)))
            i += 5
            continue
        out.append(_UNESCAPES.get(ch, ch))
        i += 1
    return "".join(out)


def _split_entry(line: str, lineno: int) -> Tuple[str, str]:
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=: \t\f":
            break
        i += 1
    if i >= len(line):
        raise PropertiesSyntaxError(lineno, f"missing separator after key {line!r}")

    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return _unescape(key, lineno), _unescape(rest, lineno)


def loads(text: str) -> Dict[str, str]:
    """Parse properties text; later duplicates win."""
    props: Dict[str, str] = {}
    for lineno, line in _logical_lines(text):
        key, value = _split_entry(line, lineno)
        props[key] = value
    return props


def _escape(text: str, is_key: bool) -> str:
    out = []
    for index, ch in enumerate(text):
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch == " " and (is_key or index == 0):
            out.append("\\ ")
        elif ch in _SPECIALS:
            out.append("\\" + ch)
        elif ord(ch) < 0x20 or ord(ch) > 0x7E:
            raw = ch.encode("utf-16-be")
            for j in range(0, len(raw), 2):
                out.append("\\u%04X" % int.from_bytes(raw[j:j + 2], "big"))
        else:
            out.append(ch)
    return "".join(out)


def dumps(items: Iterable[Tuple[str, str]], comments: Iterable[str] = ()) -> str:
    """Render key/value pairs, preceded by '#' comment lines."""
    lines = [f"#{' '.join(c.splitlines())}" for c in comments]
    lines.extend(f"{_escape(k, True)}={_escape(v, False)}" for k, v in items)
    return "\n".join(lines) + "\n"
