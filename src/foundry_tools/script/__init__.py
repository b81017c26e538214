from .parser import (
    DIALECTS,
    SUFFIX_DIALECTS,
    LiteralSite,
    StringLiteral,
    decode_js_string,
    dialect_for,
    describe_site,
    parse_literals,
)

__all__ = [
    "DIALECTS",
    "SUFFIX_DIALECTS",
    "LiteralSite",
    "StringLiteral",
    "decode_js_string",
    "dialect_for",
    "describe_site",
    "parse_literals",
]
