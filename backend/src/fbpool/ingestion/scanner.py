"""Forward-only token cursor over the schedule page markup.

The source pages are irregular enough that building a document tree buys
nothing; the extractor only ever needs "find the next cell with this marker,
then read its text". ``TokenScanner`` wraps the standard library tokenizer and
exposes exactly those moves. Each move returns ``False`` / ``None`` when the
stream runs out instead of raising.
"""

from __future__ import annotations

import codecs
import io
from collections import deque
from dataclasses import dataclass
from enum import Enum
from html.parser import HTMLParser
from typing import IO


class TokenKind(Enum):
    START = "start"
    END = "end"
    SELF_CLOSING = "self_closing"
    TEXT = "text"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    data: str  # tag name, or the text itself for TEXT tokens
    attrs: tuple[tuple[str, str | None], ...] = ()

    @property
    def first_attr_value(self) -> str | None:
        if not self.attrs:
            return None
        return self.attrs[0][1]


class _TokenCollector(HTMLParser):
    """Push-style tokenizer that queues tokens for the pull-style scanner."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.tokens: deque[Token] = deque()

    def handle_starttag(self, tag, attrs):
        self.tokens.append(Token(TokenKind.START, tag, tuple(attrs)))

    def handle_startendtag(self, tag, attrs):
        self.tokens.append(Token(TokenKind.SELF_CLOSING, tag, tuple(attrs)))

    def handle_endtag(self, tag):
        self.tokens.append(Token(TokenKind.END, tag))

    def handle_data(self, data):
        # Text cut by a chunk boundary arrives in pieces
        if self.tokens and self.tokens[-1].kind is TokenKind.TEXT:
            self.tokens[-1] = Token(TokenKind.TEXT, self.tokens[-1].data + data)
        else:
            self.tokens.append(Token(TokenKind.TEXT, data))


class TokenScanner:
    CHUNK_SIZE = 8192

    def __init__(self, source: IO[bytes] | IO[str] | bytes | str, encoding: str = "utf-8") -> None:
        if isinstance(source, bytes):
            source = io.BytesIO(source)
        elif isinstance(source, str):
            source = io.StringIO(source)
        self._stream = source
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._parser = _TokenCollector()
        self._eof = False
        self.depth = 0
        self.token: Token | None = None

    def _ready(self) -> bool:
        tokens = self._parser.tokens
        if not tokens:
            return False
        # A trailing text token may continue in the next chunk
        return len(tokens) > 1 or tokens[0].kind is not TokenKind.TEXT

    def _advance(self) -> Token | None:
        """Return the next token, reading more of the stream as needed."""
        while not self._eof and not self._ready():
            chunk = self._stream.read(self.CHUNK_SIZE)
            if not chunk:
                self._eof = True
                self._parser.feed(self._decoder.decode(b"", final=True))
                self._parser.close()
                continue
            if isinstance(chunk, bytes):
                chunk = self._decoder.decode(chunk)
            self._parser.feed(chunk)

        if not self._parser.tokens:
            return None
        tok = self._parser.tokens.popleft()
        if tok.kind is TokenKind.START:
            self.depth += 1
        elif tok.kind is TokenKind.END:
            self.depth -= 1
        self.token = tok
        return tok

    def seek_tag(self, *markers: str) -> bool:
        """Advance to the next opening tag whose first attribute value is one of ``markers``.

        The matched tag is left in ``self.token``. Returns False at end of stream.
        """
        while True:
            tok = self._advance()
            if tok is None:
                return False
            if tok.kind is TokenKind.START and tok.first_attr_value in markers:
                return True

    def next_text(self) -> str | None:
        """Return the next non-blank text, stripped. None at end of stream."""
        while True:
            tok = self._advance()
            if tok is None:
                return None
            if tok.kind is TokenKind.TEXT and tok.data.strip():
                return tok.data.strip()

    def seek_bold_text(self) -> str | None:
        """Return the text inside the next ``<b>`` element.

        None at end of stream, or when the bold element closes without text.
        """
        bold = False
        while True:
            tok = self._advance()
            if tok is None:
                return None
            if tok.kind is TokenKind.START and tok.data == "b":
                bold = True
            elif bold and tok.kind is TokenKind.END and tok.data == "b":
                return None
            elif bold and tok.kind is TokenKind.TEXT and tok.data.strip():
                return tok.data.strip()
