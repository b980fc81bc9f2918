"""Lexer for tinysh scripts.

Turns source text into a lazy stream of tokens. Shell grammar is context
sensitive, so the lexer keeps an explicit stack of modes:

- main:         commands, words, quotes, keywords
- arithmetic:   inside ``$(( ... ))`` and parenthesised groups within it
- conditional:  inside ``[ ... ]`` test expressions
- parameter:    inside ``${ ... }``
- index:        inside an array subscript ``name[ ... ]``

Whitespace and comments never reach the caller. Adjacent string tokens
(``"$PWD":/foo``) are coalesced into one.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class TokenKind(Enum):
    """Token categories produced by the lexer."""

    OP = "OP"
    KEYWORD = "KEYWORD"
    STRING = "STRING"
    NUMBER = "NUMBER"
    IDENTIFIER = "IDENTIFIER"
    NEWLINE = "NEWLINE"
    ARITHMETIC_OPEN = "ARITHMETIC_OPEN"
    CONDITIONAL_OPEN = "CONDITIONAL_OPEN"


class Mode(Enum):
    """Lexical modes kept on the mode stack."""

    MAIN = "main"
    ARITHMETIC = "arithmetic"
    CONDITIONAL = "conditional"
    PARAMETER = "parameter"
    INDEX = "index"


@dataclass(frozen=True)
class Token:
    """A lexical token.

    ``value`` is the semantic payload (quotes stripped, adjacent strings
    joined); ``text`` is the lexeme as written in the source.
    """

    kind: TokenKind
    text: str
    value: str
    single_quoted: bool = False
    """True when every segment of the string was single-quoted."""

    line: int = field(default=1, compare=False)
    column: int = field(default=1, compare=False)

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.value!r})"


class LexerError(Exception):
    """Raised when the input matches no rule of the active mode."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"syntax error at line {line}, column {column}: {message}")
        self.line = line
        self.column = column


KEYWORDS = frozenset({"if", "then", "else", "fi"})

# Characters that may continue a bareword. Used as a negative lookahead so
# that keywords, numbers and test operators only match as whole words.
_WORD_CHARS = r"A-Za-z0-9_:$/.*@%,~+#=\\\"'-"
# A "$" inside a word, unless it opens "${" or "$((", which are lexed apart
_DOLLAR = r"\$(?!\{|\(\()"
# Characters that join an expansion to the word right after it
_GLUE = re.compile(r"[A-Za-z0-9_:$/.*@%,~+=\\\"'-]")

_WHITESPACE = re.compile(r"(?:[ \t\r]|\\\n)+")
_ARITHMETIC_WHITESPACE = re.compile(r"(?:[ \t\r\n]|\\\n)+")
_COMMENT = re.compile(r"#[^\n]*")
_KEYWORD = re.compile(rf"(?:{'|'.join(sorted(KEYWORDS))})(?![{_WORD_CHARS}])")
_ASSIGNMENT_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?=[=\[])")
_WORD_NUMBER = re.compile(rf"[0-9]+(?![{_WORD_CHARS}])")
_NUMBER = re.compile(r"[0-9]+")
_DOUBLE_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"', re.DOTALL)
_SINGLE_QUOTED = re.compile(r"'([^']*)'")
_BAREWORD = re.compile(
    rf"(?:[A-Za-z0-9_:/.*@%,~+=-]|{_DOLLAR}|\\.)(?:[A-Za-z0-9_:/.*@%,~+#=\[\]-]|{_DOLLAR}|\\.)*",
    re.DOTALL,
)
# Inside [ ... ] a closing bracket always ends the test.
_TEST_WORD = re.compile(
    rf"(?:[A-Za-z0-9_:/.*@%,~-]|{_DOLLAR}|\\.)(?:[A-Za-z0-9_:/.*@%,~+#=-]|{_DOLLAR}|\\.)*",
    re.DOTALL,
)
_DASH_OPERATOR = re.compile(rf"-[A-Za-z]{{1,2}}(?![{_WORD_CHARS}])")
_STANDALONE_STAR = re.compile(rf"\*(?![{_WORD_CHARS}])")
_ARITHMETIC_NAME = re.compile(
    r"\$(?:[A-Za-z_][A-Za-z0-9_]*|[0-9]+|#)|[A-Za-z_][A-Za-z0-9_]*"
)
_PARAMETER_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*|[0-9]+")

_MAIN_OPERATORS = ("(", ")")
_ARITHMETIC_OPERATORS = ("=", "+", "-", "*", "/", "%")


def _escape_literal(value: str) -> str:
    """Protect single-quoted text that is glued to interpolated text."""
    return value.replace("\\", "\\\\").replace("$", "\\$")


class Lexer:
    """Hand-written, mode-stack driven tokenizer."""

    def __init__(self, source: str):
        self.source = source
        self._pos = 0
        self._modes: list[Mode] = [Mode.MAIN]
        self._newlines = [i for i, char in enumerate(source) if char == "\n"]
        # Last significant raw token, for adjacency and command-start checks
        self._previous: Optional[Token] = None
        self._previous_end = -1
        self._command_start = True
        # Offset just past an assignment name (or its subscript): where "=" and
        # an index "[" are operators rather than word characters
        self._name_end = -1
        self._primed = False
        self._lookahead: Optional[Token] = None
        self._lookahead_glued = False

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next()
            if token is None:
                return
            yield token

    @property
    def mode(self) -> Mode:
        return self._modes[-1]

    def next(self) -> Optional[Token]:
        """Return the next token, or None at end of input."""
        token = self._pop_raw()
        if token is None or token.kind is not TokenKind.STRING:
            return token

        segments = [token]
        while (
            self._lookahead is not None
            and self._lookahead.kind is TokenKind.STRING
            and self._lookahead_glued
        ):
            segments.append(self._lookahead)
            self._pop_raw()

        if len(segments) == 1:
            return token
        return self._coalesce(segments)

    # -------------------------------------------------------------------------
    # Raw token production
    # -------------------------------------------------------------------------

    def _pop_raw(self) -> Optional[Token]:
        if not self._primed:
            self._lookahead, self._lookahead_glued = self._scan()
            self._primed = True
        current = self._lookahead
        if current is not None:
            self._lookahead, self._lookahead_glued = self._scan()
        return current

    def _coalesce(self, segments: list[Token]) -> Token:
        single = all(segment.single_quoted for segment in segments)
        if single:
            value = "".join(segment.value for segment in segments)
        else:
            value = "".join(
                _escape_literal(segment.value) if segment.single_quoted else segment.value
                for segment in segments
            )
        first = segments[0]
        return Token(
            TokenKind.STRING,
            "".join(segment.text for segment in segments),
            value,
            single_quoted=single,
            line=first.line,
            column=first.column,
        )

    def _scan(self) -> tuple[Optional[Token], bool]:
        """Scan one significant token, skipping whitespace and comments.

        Returns the token and whether it directly follows the previous one.
        """
        while self._pos < len(self.source):
            glued = self._previous_end == self._pos
            mode = self.mode
            if mode is Mode.MAIN:
                token = self._scan_main()
            elif mode is Mode.ARITHMETIC:
                token = self._scan_arithmetic(index=False)
            elif mode is Mode.INDEX:
                token = self._scan_arithmetic(index=True)
            elif mode is Mode.CONDITIONAL:
                token = self._scan_conditional()
            else:
                token = self._scan_parameter()

            if token is None:
                # Whitespace or comment; glued-ness ends here.
                self._previous_end = -1
                continue

            self._previous = token
            self._previous_end = self._pos
            self._command_start = token.kind is TokenKind.NEWLINE or (
                token.kind is TokenKind.KEYWORD and token.value in (";", "then", "else")
            )
            return token, glued
        return None, False

    def _scan_main(self) -> Optional[Token]:
        source, pos = self.source, self._pos
        char = source[pos]

        if self._skip(_WHITESPACE) or self._skip(_COMMENT):
            return None
        if char == "\n":
            return self._emit(TokenKind.NEWLINE, "\n")
        token = self._scan_expansion()
        if token is not None:
            return token
        if char == "=" and self._name_end == pos:
            return self._emit(TokenKind.OP, "=")
        if char == "[":
            if self._name_end == pos:
                return self._emit(TokenKind.OP, "[", push=Mode.INDEX)
            return self._emit(TokenKind.CONDITIONAL_OPEN, "[", push=Mode.CONDITIONAL)
        if char == ";":
            return self._emit(TokenKind.KEYWORD, ";")

        match = _KEYWORD.match(source, pos)
        if match:
            return self._emit(TokenKind.KEYWORD, match.group())
        if self._command_start:
            match = _ASSIGNMENT_NAME.match(source, pos)
            if match:
                token = self._emit(TokenKind.STRING, match.group())
                self._name_end = self._pos
                return token
        match = _WORD_NUMBER.match(source, pos)
        if match and not self._glued_to(TokenKind.STRING):
            return self._emit(TokenKind.NUMBER, match.group())

        token = self._scan_quoted_or_word()
        if token is not None:
            return token
        if char in _MAIN_OPERATORS:
            return self._emit(TokenKind.OP, char)
        raise self._error(char)

    def _scan_conditional(self) -> Optional[Token]:
        source, pos = self.source, self._pos
        char = source[pos]

        if self._skip(_WHITESPACE):
            return None
        if char == "]":
            return self._emit(TokenKind.OP, "]", pop=True)
        token = self._scan_expansion()
        if token is not None:
            return token

        match = _DASH_OPERATOR.match(source, pos)
        if match:
            return self._emit(TokenKind.OP, match.group())
        if source.startswith("!=", pos):
            return self._emit(TokenKind.OP, "!=")
        if char in "=()+":
            return self._emit(TokenKind.OP, char)
        if _STANDALONE_STAR.match(source, pos):
            return self._emit(TokenKind.OP, "*")

        match = _WORD_NUMBER.match(source, pos)
        if match and not self._glued_to(TokenKind.STRING):
            return self._emit(TokenKind.NUMBER, match.group())
        token = self._scan_quoted_or_word(_TEST_WORD)
        if token is not None:
            return token
        raise self._error(char)

    def _scan_arithmetic(self, index: bool) -> Optional[Token]:
        source, pos = self.source, self._pos
        char = source[pos]

        if self._skip(_ARITHMETIC_WHITESPACE):
            return None
        if source.startswith("$((", pos):
            return self._open_arithmetic()
        if source.startswith("${", pos):
            return self._emit(TokenKind.OP, "${", push=Mode.PARAMETER)
        if char == "(":
            return self._emit(TokenKind.OP, "(", push=Mode.ARITHMETIC)
        if char == ")":
            # Inside a subscript a ")" closes nothing the index mode opened.
            return self._emit(TokenKind.OP, ")", pop=not index)
        if char == "[" and self._glued_to(TokenKind.IDENTIFIER):
            return self._emit(TokenKind.OP, "[", push=Mode.INDEX)
        if index and char == "]":
            token = self._emit(TokenKind.OP, "]", pop=True)
            if self.mode is Mode.MAIN:
                # Closed the subscript of name[i]=value
                self._name_end = self._pos
            return token
        if index and char == "@":
            return self._emit(TokenKind.OP, "@")
        if char in _ARITHMETIC_OPERATORS:
            return self._emit(TokenKind.OP, char)

        match = _NUMBER.match(source, pos)
        if match:
            return self._emit(TokenKind.NUMBER, match.group())
        match = _ARITHMETIC_NAME.match(source, pos)
        if match:
            return self._emit(TokenKind.IDENTIFIER, match.group())
        raise self._error(char)

    def _scan_parameter(self) -> Optional[Token]:
        source, pos = self.source, self._pos
        char = source[pos]

        if char == "}":
            return self._emit(TokenKind.OP, "}", pop=True)
        if char == "#":
            if source.startswith("#}", pos):
                return self._emit(TokenKind.IDENTIFIER, "#")
            return self._emit(TokenKind.OP, "#")
        if char == "[":
            return self._emit(TokenKind.OP, "[", push=Mode.INDEX)
        match = _PARAMETER_NAME.match(source, pos)
        if match:
            return self._emit(TokenKind.IDENTIFIER, match.group())
        raise self._error(char)

    def _scan_quoted_or_word(self, word: re.Pattern[str] = _BAREWORD) -> Optional[Token]:
        source, pos = self.source, self._pos
        match = _DOUBLE_QUOTED.match(source, pos)
        if match:
            return self._emit(TokenKind.STRING, match.group(), value=match.group(1))
        match = _SINGLE_QUOTED.match(source, pos)
        if match:
            return self._emit(
                TokenKind.STRING, match.group(), value=match.group(1), single_quoted=True
            )
        match = word.match(source, pos)
        if match:
            return self._emit(TokenKind.STRING, match.group())
        return None

    def _scan_expansion(self) -> Optional[Token]:
        """Lex a ``${...}`` or ``$((...))`` in main or conditional mode.

        On its own it opens the parameter or arithmetic mode. Touching a word
        on either side (``${a}b``, ``b$((1+1))``) it is one STRING segment
        of that word, expanded when the string is evaluated.
        """
        source, pos = self.source, self._pos
        arithmetic = source.startswith("$((", pos)
        if not arithmetic and not source.startswith("${", pos):
            return None

        end = _expansion_end(source, pos)
        if end != -1 and (self._glued_to(TokenKind.STRING) or _GLUE.match(source, end)):
            return self._emit(TokenKind.STRING, source[pos:end])
        if arithmetic:
            return self._open_arithmetic()
        return self._emit(TokenKind.OP, "${", push=Mode.PARAMETER)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _open_arithmetic(self) -> Token:
        # One level per parenthesis of "$((", so that "))" closes both.
        self._modes.append(Mode.ARITHMETIC)
        return self._emit(TokenKind.ARITHMETIC_OPEN, "$((", push=Mode.ARITHMETIC)

    def _skip(self, pattern: re.Pattern[str]) -> bool:
        match = pattern.match(self.source, self._pos)
        if match is None:
            return False
        self._pos = match.end()
        return True

    def _glued_to(self, kind: TokenKind) -> bool:
        """Whether the previous token ends right where we are."""
        return (
            self._previous is not None
            and self._previous.kind is kind
            and self._previous_end == self._pos
        )

    def _emit(
        self,
        kind: TokenKind,
        text: str,
        *,
        value: Optional[str] = None,
        single_quoted: bool = False,
        push: Optional[Mode] = None,
        pop: bool = False,
    ) -> Token:
        line, column = self._location(self._pos)
        self._pos += len(text)
        if push is not None:
            self._modes.append(push)
        if pop and len(self._modes) > 1:
            self._modes.pop()
        return Token(
            kind,
            text,
            text if value is None else value,
            single_quoted=single_quoted,
            line=line,
            column=column,
        )

    def _location(self, pos: int) -> tuple[int, int]:
        line_index = bisect.bisect_left(self._newlines, pos)
        line_start = self._newlines[line_index - 1] + 1 if line_index else 0
        return line_index + 1, pos - line_start + 1

    def _error(self, char: str) -> LexerError:
        line, column = self._location(self._pos)
        if char == '"' or char == "'":
            return LexerError(f"unterminated quoted string ({self.mode.value} mode)", line, column)
        return LexerError(f"unexpected character {char!r} ({self.mode.value} mode)", line, column)


def _expansion_end(source: str, pos: int) -> int:
    """Offset just past the ``${...}`` or ``$((...))`` at pos, or -1 if unclosed."""
    opener, closer = ("(", ")") if source.startswith("$((", pos) else ("{", "}")
    depth = 0
    for i in range(pos + 1, len(source)):
        if source[i] == opener:
            depth += 1
        elif source[i] == closer:
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def tokenize(source: str) -> list[Token]:
    """Tokenize a whole script into a list."""
    return list(Lexer(source))
