from __future__ import annotations

import functools
import re
from pathlib import PurePath
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..utils.logger import ConfigurationError, ScriptParseError

DIALECTS = ("javascript", "typescript", "tsx")

SUFFIX_DIALECTS = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# 字面量所处的语法位置
SITE_EXPRESSION = "expression"
SITE_IMPORT_SOURCE = "import_source"
SITE_PROPERTY_KEY = "property_key"
SITE_CALL_ARGUMENT = "call_argument"
SITE_BINARY_OPERAND = "binary_operand"

# tree-sitter 把 && || ?? 也归为 binary_expression，这里按逻辑表达式处理
LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

_MODULE_STATEMENTS = ("import_statement", "export_statement")
_KEYED_NODES = ("pair", "pair_pattern")

_ESCAPE_RE = re.compile(
    r"\\(?:"
    r"u\{([0-9a-fA-F]+)\}"          # \u{1F600}
    r"|u([0-9a-fA-F]{4})"           # \u00e9
    r"|x([0-9a-fA-F]{2})"           # \xe9
    r"|([0-3][0-7]{0,2}|[4-7][0-7]?)"  # legacy octal, \0
    r"|(\r\n|[\s\S])"               # \n \t ... line continuation, identity escape
    r")"
)
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
_LINE_CONTINUATIONS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})
_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")


@dataclass(frozen=True)
class LiteralSite:
    """Syntactic slot a string literal occupies, as seen by the context rules."""

    kind: str = SITE_EXPRESSION
    # call_argument
    callee_object: Optional[str] = None   # receiver name when it is a plain identifier
    callee_property: Optional[str] = None
    arg_index: int = -1
    arg_count: int = 0
    # binary_operand
    operator: Optional[str] = None


@dataclass(frozen=True)
class StringLiteral:
    value: str
    start: int          # byte offset, opening quote included
    end: int            # byte offset, closing quote included
    line: int           # 1-based
    column: int         # 0-based, bytes
    quote: str
    site: LiteralSite


def decode_js_string(inner: str) -> str:
    """Cook the body of a JS string literal (the text between the quotes)."""

    def _replace(m: re.Match) -> str:
        code_point, unit, byte, octal, char = m.groups()
        if code_point is not None:
            cp = int(code_point, 16)
            return chr(cp) if cp <= 0x10FFFF else m.group(0)
        if unit is not None:
            return chr(int(unit, 16))
        if byte is not None:
            return chr(int(byte, 16))
        if octal is not None:
            return chr(int(octal, 8))
        if char in _LINE_CONTINUATIONS:
            return ""
        return _SIMPLE_ESCAPES.get(char, char)

    out = _ESCAPE_RE.sub(_replace, inner)
    if _SURROGATE_RE.search(out):
        # \uXXXX\uXXXX 写出的代理对需要合并成一个字符
        try:
            out = out.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
        except UnicodeDecodeError:
            pass  # lone surrogate, keep as is
    return out


@functools.lru_cache(maxsize=None)
def _language(dialect: str) -> Language:
    if dialect == "javascript":
        return Language(tree_sitter_javascript.language())
    if dialect == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    if dialect == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    raise ConfigurationError(f"Unknown script dialect: {dialect}", config_key="dialect")


def dialect_for(path: str | PurePath) -> str:
    """Pick the grammar from the file suffix."""
    suffix = PurePath(path).suffix.lower()
    try:
        return SUFFIX_DIALECTS[suffix]
    except KeyError:
        raise ConfigurationError(f"Not a script file: {path}", config_key="dialect", suffix=suffix) from None


def _same(a: Optional[Node], b: Optional[Node]) -> bool:
    return a is not None and b is not None and (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


def _text(node: Optional[Node]) -> Optional[str]:
    if node is None or node.text is None:
        return None
    return node.text.decode("utf-8", errors="replace")


def _slot(node: Node) -> Tuple[Node, Optional[Node]]:
    """Skip enclosing parentheses; return (node in slot, its real parent)."""
    cur = node
    parent = cur.parent
    while parent is not None and parent.type == "parenthesized_expression":
        cur = parent
        parent = cur.parent
    return cur, parent


def _call_site(arg: Node, args: Node, call: Node) -> LiteralSite:
    arguments = [c for c in args.named_children if c.type != "comment"]
    index = next((i for i, c in enumerate(arguments) if _same(c, arg)), -1)

    obj_name = prop_name = None
    callee = call.child_by_field_name("function")
    if callee is not None and callee.type == "member_expression":
        obj = callee.child_by_field_name("object")
        prop = callee.child_by_field_name("property")
        if obj is not None and obj.type == "identifier":
            obj_name = _text(obj)
        if prop is not None:
            prop_name = _text(prop)

    return LiteralSite(
        kind=SITE_CALL_ARGUMENT,
        callee_object=obj_name,
        callee_property=prop_name,
        arg_index=index,
        arg_count=len(arguments),
    )


def describe_site(node: Node) -> LiteralSite:
    """Classify the syntactic position of a ``string`` node."""
    cur, parent = _slot(node)
    if parent is None:
        return LiteralSite()

    if parent.type in _MODULE_STATEMENTS and _same(parent.child_by_field_name("source"), cur):
        return LiteralSite(kind=SITE_IMPORT_SOURCE)

    # 计算属性键 ["x"] 的父节点是 computed_property_name，不会落到这里
    if parent.type in _KEYED_NODES and _same(parent.child_by_field_name("key"), cur):
        return LiteralSite(kind=SITE_PROPERTY_KEY)

    if parent.type == "arguments":
        call = parent.parent
        if call is not None and call.type == "call_expression":
            return _call_site(cur, parent, call)
        return LiteralSite()

    if parent.type == "binary_expression":
        operator = _text(parent.child_by_field_name("operator"))
        if operator not in LOGICAL_OPERATORS:
            return LiteralSite(kind=SITE_BINARY_OPERAND, operator=operator)

    return LiteralSite()


def _walk(root: Node) -> Iterator[Node]:
    # 显式栈，避免深层嵌套的 AST 触发递归上限
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _first_error(root: Node) -> Optional[Node]:
    for node in _walk(root):
        if node.is_error or node.is_missing:
            return node
    return None


def parse_literals(source: str | bytes, dialect: str = "javascript") -> List[StringLiteral]:
    """
    Parse a script and return every string literal in document order.

    Args:
        source: script text (str is encoded as UTF-8; offsets refer to those bytes)
        dialect: "javascript" (with JSX), "typescript" or "tsx"

    Raises:
        ScriptParseError: the source is not syntactically valid
        ConfigurationError: unknown dialect
    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    tree = Parser(_language(dialect)).parse(data)
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root) or root
        line, column = bad.start_point[0] + 1, bad.start_point[1]
        raise ScriptParseError(
            f"Syntax error at line {line}, column {column}",
            line=line,
            column=column,
            dialect=dialect,
        )

    literals: List[StringLiteral] = []
    for node in _walk(root):
        if node.type != "string":
            continue
        raw = data[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
        if len(raw) < 2:
            continue
        literals.append(StringLiteral(
            value=decode_js_string(raw[1:-1]),
            start=node.start_byte,
            end=node.end_byte,
            line=node.start_point[0] + 1,
            column=node.start_point[1],
            quote=raw[0],
            site=describe_site(node),
        ))

    literals.sort(key=lambda lit: lit.start)
    return literals
