"""Task path tokenizer.

A path is a `/`-delimited chain of task names, optionally quoted:

    /Work/"Follow up"/Notes      -> ["Work", "Follow up", "Notes"]
    /"Release \\"v2\\""           -> ['Release "v2"']

Rules:
- A `"` opens a quoted run that lasts until the next unescaped `"`.
  Separators and whitespace inside quotes are kept verbatim.
- A backslash escapes the next character, inside or outside quotes.
  A dangling backslash at the end of input is kept literally.
- Unquoted leading/trailing whitespace of a segment is trimmed.
- The leading `/` and a single trailing `/` are optional.

All functions in this module are pure.
"""

from dataclasses import dataclass, field

from taskr.domain.shared.errors import EmptySegmentError, MalformedPathError

SEPARATOR = "/"
QUOTE = '"'
ESCAPE = "\\"


@dataclass
class TokenizedPath:
    """Result of tokenizing possibly half-typed input.

    components are the segments closed by a separator; remainder is the
    text typed after the last separator.
    """

    components: list[str] = field(default_factory=list)
    remainder: str = ""
    remainder_quoted: bool = False
    ended_with_separator: bool = False


class _Segment:
    """Characters of one segment plus which of them were quoted or escaped."""

    def __init__(self) -> None:
        self.chars: list[str] = []
        self.protected: list[bool] = []
        self.had_quotes = False

    def append(self, char: str, protected: bool) -> None:
        self.chars.append(char)
        self.protected.append(protected)

    def raw(self) -> str:
        return "".join(self.chars)

    def text(self) -> str:
        start, end = 0, len(self.chars)
        while start < end and not self.protected[start] and self.chars[start].isspace():
            start += 1
        while end > start and not self.protected[end - 1] and self.chars[end - 1].isspace():
            end -= 1
        return "".join(self.chars[start:end])


def _normalize(text: str) -> str:
    content = text.strip()
    if content.startswith(SEPARATOR):
        content = content[1:]
    return content


def _scan(content: str, strict: bool) -> TokenizedPath:
    components: list[str] = []
    segment = _Segment()
    in_quotes = False
    escaped = False
    ended_with_separator = False

    for char in content:
        ended_with_separator = False
        if escaped:
            segment.append(char, protected=True)
            escaped = False
            continue
        if char == ESCAPE:
            escaped = True
            continue
        if char == QUOTE:
            segment.had_quotes = True
            in_quotes = not in_quotes
            continue
        if char == SEPARATOR and not in_quotes:
            name = segment.text()
            if name:
                components.append(name)
            elif strict:
                raise EmptySegmentError(len(components))
            segment = _Segment()
            ended_with_separator = True
            continue
        segment.append(char, protected=in_quotes)

    if escaped:
        segment.append(ESCAPE, protected=True)

    if in_quotes and strict:
        raise MalformedPathError(QUOTE + segment.raw())

    return TokenizedPath(
        components=components,
        remainder=segment.text(),
        remainder_quoted=segment.had_quotes or in_quotes,
        ended_with_separator=ended_with_separator,
    )


def tokenize_path(text: str) -> list[str]:
    """Split a typed path into segment names.

    Empty or whitespace-only input (and a lone `/`) yields an empty
    list; callers must reject it.

    Raises:
        MalformedPathError: A quoted segment is never closed.
        EmptySegmentError: A segment is empty, e.g. `a//b` or `a/""`.
    """
    content = _normalize(text)
    if not content:
        return []

    tokenized = _scan(content, strict=True)
    segments = list(tokenized.components)
    if tokenized.ended_with_separator:
        return segments
    if not tokenized.remainder:
        raise EmptySegmentError(len(segments))
    segments.append(tokenized.remainder)
    return segments


def tokenize_partial(text: str) -> TokenizedPath:
    """Tokenize input that is still being typed.

    Never raises: empty segments are skipped and an open quote simply
    leaves the remainder quoted.
    """
    return _scan(_normalize(text), strict=False)


def encode_segment(name: str) -> str:
    """Encode a task name so that tokenize_path gives it back unchanged."""
    if not name:
        return QUOTE * 2

    needs_quoting = (
        SEPARATOR in name
        or QUOTE in name
        or name[0].isspace()
        or name[-1].isspace()
    )
    escaped = "".join(
        ESCAPE + char if char in (QUOTE, ESCAPE) else char for char in name
    )
    if needs_quoting:
        return QUOTE + escaped + QUOTE
    return escaped


def format_path(segments: list[str]) -> str:
    """Join names into a round-trippable path string."""
    return SEPARATOR + SEPARATOR.join(encode_segment(name) for name in segments)
