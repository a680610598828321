"""Parsing module for date format strings."""

from node_schema.parsing.date_lexer import DateFormatLexer

__all__ = [
    "DateFormatLexer",
]
