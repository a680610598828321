"""Lexer for moment-style date format strings (e.g. ``YYYY-MM-DDTHH:mmZ``)."""

import ply.lex as lex

from node_schema.errors import DateFormatError


class DateFormatLexer:
    """Lexer for tokenizing date format strings.

    FIELD tokens are date/time placeholders, ESCAPED tokens are ``[...]``
    literal runs (brackets stripped) and every other character is a LITERAL.
    """

    tokens = [
        "ESCAPED",
        "FIELD",
        "LITERAL",
    ]

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_ESCAPED(self, t: lex.LexToken) -> lex.LexToken:
        r"\[[^\]]*\]"
        t.value = t.value[1:-1]
        return t

    # Longer placeholders must come before their prefixes
    def t_FIELD(self, t: lex.LexToken) -> lex.LexToken:
        r"YYYY|YY|Q|MMMM|MMM|MM|M|Do|DDDD|DDD|DD|D|dddd|ddd|d|E|WW|W|HH|H|hh|h|mm|m|ss|s|SSS|SS|S|A|a|ZZ|Z|X|x"
        return t

    def t_LITERAL(self, t: lex.LexToken) -> lex.LexToken:
        r"[^\[]"
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise DateFormatError(f"Unterminated '[' escape at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
