"""Parser module for tinysh."""

from .lexer import (
    KEYWORDS,
    Lexer,
    LexerError,
    Mode,
    Token,
    TokenKind,
    tokenize,
)
from .parser import (
    Parser,
    ParseException,
    Precedence,
    parse,
    parse_expansion,
)

__all__ = [
    # Lexer
    "KEYWORDS",
    "Lexer",
    "LexerError",
    "Mode",
    "Token",
    "TokenKind",
    "tokenize",
    # Parser
    "Parser",
    "ParseException",
    "Precedence",
    "parse",
    "parse_expansion",
]
