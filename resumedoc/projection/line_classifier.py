from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from resumedoc.normalize.utils import is_bullet_like, normalize_line, strip_bullet_prefix

_DATE_RANGE_RE = re.compile(
    r"(\d{4}|[A-Za-z]{3,9}\.?\s*'?\d{2,4})\s*(?:-|–|—|to)\s*"
    r"(\d{4}|[A-Za-z]{3,9}\.?\s*'?\d{2,4}|present|current|now)",
    re.IGNORECASE,
)
_HEADER_PAIR_RE = re.compile(r"^(.+?)\s+(?:—|–|-|\||at)\s+(.+)$")
_SHORT_NAME_RE = re.compile(r"^[A-Z][A-Za-z0-9\s&.,'/()-]+$")
_SEPARATOR_CHARS = " \t,|()-–—"
_MAX_HEADER_CHARS = 100
_MAX_SHORT_NAME_CHARS = 60
_MAX_DATE_REMAINDER_CHARS = 40


class LineClass(str, Enum):
    BLANK = "blank"
    BULLET = "bullet"
    DATE_RANGE = "date_range"
    HEADER_PAIR = "header_pair"
    SHORT_NAME = "short_name"
    TEXT = "text"


class ParserState(str, Enum):
    SEEKING_ENTRY = "seekingEntry"
    IN_ENTRY_HEADER = "inEntryHeader"
    IN_BULLETS = "inBullets"


@dataclass(slots=True)
class LineToken:
    cls: LineClass
    text: str
    parts: tuple[str, ...] = ()
    dates: str = ""


@dataclass(slots=True)
class ParsedEntry:
    primary: str = ""
    secondary: str = ""
    meta: str = ""
    bullets: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ParsedBlock:
    summary: list[str] = field(default_factory=list)
    entries: list[ParsedEntry] = field(default_factory=list)


def _header_parts(text: str) -> tuple[str, str] | None:
    if len(text) > _MAX_HEADER_CHARS or text.endswith("."):
        return None
    match = _HEADER_PAIR_RE.match(text)
    if not match:
        return None
    left, right = match.group(1).strip(), match.group(2).strip()
    if not left or not right:
        return None
    return left, right


def classify_line(line: str) -> LineToken:
    text = normalize_line(line)
    if not text:
        return LineToken(LineClass.BLANK, "")
    if is_bullet_like(text):
        return LineToken(LineClass.BULLET, strip_bullet_prefix(text))

    date = _DATE_RANGE_RE.search(text)
    if date:
        remainder = f"{text[: date.start()]} {text[date.end():]}".strip(_SEPARATOR_CHARS)
        remainder = normalize_line(remainder)
        parts = _header_parts(remainder) if remainder else None
        if parts:
            return LineToken(LineClass.HEADER_PAIR, text, parts=parts, dates=date.group(0))
        if len(remainder) <= _MAX_DATE_REMAINDER_CHARS:
            return LineToken(LineClass.DATE_RANGE, text, dates=date.group(0))
        return LineToken(LineClass.TEXT, text)

    parts = _header_parts(text)
    if parts:
        return LineToken(LineClass.HEADER_PAIR, text, parts=parts)
    if len(text) <= _MAX_SHORT_NAME_CHARS and not text.endswith(".") and _SHORT_NAME_RE.match(text):
        return LineToken(LineClass.SHORT_NAME, text)
    return LineToken(LineClass.TEXT, text)


def _opens_entry(lookahead: tuple[LineToken, ...]) -> bool:
    """A short name starts an entry when a date range follows, directly or after a second name."""
    classes = [token.cls for token in lookahead]
    if classes[:1] == [LineClass.DATE_RANGE]:
        return True
    return classes[:2] == [LineClass.SHORT_NAME, LineClass.DATE_RANGE]


class LineClassifier:
    """Groups classified lines into entries.

    seekingEntry: no entry open; headers, dates and bullets open one, prose is summary.
    inEntryHeader: entry open and still collecting primary/secondary/meta.
    inBullets: entry open and collecting bullets until the next header.
    """

    def __init__(self) -> None:
        self.state = ParserState.SEEKING_ENTRY
        self.block = ParsedBlock()
        self._current: ParsedEntry | None = None

    def _open(self, **values: str) -> ParsedEntry:
        entry = ParsedEntry(**values)
        self._current = entry
        self.block.entries.append(entry)
        self.state = ParserState.IN_ENTRY_HEADER
        return entry

    def _open_from(self, token: LineToken) -> None:
        if token.cls is LineClass.HEADER_PAIR:
            self._open(primary=token.parts[0], secondary=token.parts[1], meta=token.dates)
        elif token.cls is LineClass.DATE_RANGE:
            self._open(meta=token.text)
        else:
            self._open(primary=token.text)

    def _bullet(self, text: str) -> None:
        entry = self._current if self._current is not None else self._open()
        entry.bullets.append(text)
        self.state = ParserState.IN_BULLETS

    def feed(self, token: LineToken, lookahead: tuple[LineToken, ...] = ()) -> None:
        if token.cls is LineClass.BLANK:
            return
        next_cls = lookahead[0].cls if lookahead else None
        current = self._current

        if current is None or self.state is ParserState.SEEKING_ENTRY:
            if token.cls in (LineClass.HEADER_PAIR, LineClass.DATE_RANGE):
                self._open_from(token)
            elif token.cls is LineClass.SHORT_NAME and next_cls in (LineClass.DATE_RANGE, LineClass.SHORT_NAME):
                self._open_from(token)
            elif token.cls is LineClass.BULLET:
                self._bullet(token.text)
            else:
                self.block.summary.append(token.text)
            return

        if self.state is ParserState.IN_ENTRY_HEADER:
            if token.cls is LineClass.HEADER_PAIR:
                self._open_from(token)
            elif token.cls is LineClass.DATE_RANGE and not current.meta:
                current.meta = token.text
            elif token.cls is LineClass.SHORT_NAME and not current.primary:
                current.primary = token.text
            elif token.cls is LineClass.SHORT_NAME and not current.secondary:
                current.secondary = token.text
            elif token.cls is LineClass.SHORT_NAME and not current.meta:
                current.meta = token.text
            else:
                self._bullet(token.text)
            return

        if token.cls in (LineClass.HEADER_PAIR, LineClass.DATE_RANGE):
            self._open_from(token)
        elif token.cls is LineClass.SHORT_NAME and _opens_entry(lookahead):
            self._open_from(token)
        else:
            self._bullet(token.text)

    def run(self, lines: list[str]) -> ParsedBlock:
        tokens = [token for token in (classify_line(line) for line in lines) if token.cls is not LineClass.BLANK]
        for index, token in enumerate(tokens):
            self.feed(token, tuple(tokens[index + 1 : index + 3]))
        return self.block


def parse_text_block(text: str) -> ParsedBlock:
    return LineClassifier().run(text.splitlines())
