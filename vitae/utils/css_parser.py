"""
Minimal CSS parser and minifying serializer.

Parses a stylesheet into a small AST (rules, at-rules, declarations, comments)
so that post-processing steps (license extraction, purging, font rewriting)
operate on structure rather than on raw text. Covers what compiled Sass
emits: plain rules, nested rule blocks (@media, @supports, @keyframes),
declaration blocks (@font-face, @page) and statement at-rules (@charset,
@import). Native CSS nesting is not supported.

Usage:
    from vitae.utils.css_parser import parse_css, serialize_css

    sheet = parse_css(css_text)
    minified = serialize_css(sheet)
"""

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

# At-rules whose block holds declarations rather than rules
DECLARATION_AT_RULES = {
    "font-face",
    "page",
    "counter-style",
    "property",
    "font-palette-values",
    "viewport",
}


class CSSParseError(ValueError):
    """Raised on structurally invalid CSS (unbalanced braces, stray text)."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at offset {position}")


@dataclass
class Comment:
    """A /* ... */ comment. ``text`` excludes the delimiters."""

    text: str

    @property
    def is_license(self) -> bool:
        """Comments opened with /*! are preserved license notices."""
        return self.text.startswith("!")


@dataclass
class Declaration:
    name: str
    value: str


@dataclass
class Rule:
    selectors: List[str]
    declarations: List[Declaration] = field(default_factory=list)


@dataclass
class AtRule:
    """
    An at-rule.

    Exactly one of ``rules`` / ``declarations`` is set for block at-rules;
    both are None for statement at-rules such as @charset.
    """

    name: str
    prelude: str = ""
    rules: Optional[List["Node"]] = None
    declarations: Optional[List[Declaration]] = None


Node = Union[Comment, Rule, AtRule]


@dataclass
class Stylesheet:
    nodes: List[Node] = field(default_factory=list)

    def walk(self) -> Iterator[Node]:
        """Depth-first iteration over every node, nested blocks included."""
        yield from _walk(self.nodes)

    def rule_count(self) -> int:
        return sum(1 for node in self.walk() if isinstance(node, Rule))


def _walk(nodes: List[Node]) -> Iterator[Node]:
    for node in nodes:
        yield node
        if isinstance(node, AtRule) and node.rules is not None:
            yield from _walk(node.rules)


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        # Comments met inside selectors or declaration blocks
        self.pending: List[Comment] = []

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def read_comment(self) -> Comment:
        end = self.text.find("*/", self.pos + 2)
        if end == -1:
            raise CSSParseError("Unterminated comment", self.pos)
        comment = Comment(self.text[self.pos + 2 : end])
        self.pos = end + 2
        return comment

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def skip_string(self) -> None:
        quote = self.text[self.pos]
        i = self.pos + 1
        while i < len(self.text):
            char = self.text[i]
            if char == "\\":
                i += 2
                continue
            if char == quote:
                self.pos = i + 1
                return
            i += 1
        raise CSSParseError("Unterminated string", self.pos)

    def read_until(self, stops: str) -> str:
        """
        Read up to (not including) the first top-level character in ``stops``.

        Strings and parenthesized/bracketed groups are skipped as units.
        Comments are cut out of the returned text; license comments are kept
        in ``self.pending``.
        """
        chunks = []
        start = self.pos
        depth = 0
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char in "\"'":
                self.skip_string()
                continue
            if self.text.startswith("/*", self.pos):
                chunks.append(self.text[start : self.pos])
                comment = self.read_comment()
                if comment.is_license:
                    self.pending.append(comment)
                chunks.append(" ")
                start = self.pos
                continue
            if char in "([":
                depth += 1
            elif char in ")]":
                depth = max(depth - 1, 0)
            elif depth == 0 and char in stops:
                break
            self.pos += 1
        chunks.append(self.text[start : self.pos])
        return "".join(chunks)

    def flush_pending(self, nodes: List[Node]) -> None:
        nodes.extend(self.pending)
        self.pending = []

    def parse_rule_list(self, nested: bool) -> List[Node]:
        nodes: List[Node] = []
        while True:
            self.skip_whitespace()
            if self.at_end():
                if nested:
                    raise CSSParseError("Unclosed block", self.pos)
                return nodes
            if self.text.startswith("/*", self.pos):
                nodes.append(self.read_comment())
                continue
            char = self.peek()
            if char == "}":
                if not nested:
                    raise CSSParseError("Unexpected '}'", self.pos)
                self.pos += 1
                return nodes
            if char == "@":
                node = self.parse_at_rule()
            else:
                node = self.parse_rule()
            self.flush_pending(nodes)
            if node is not None:
                nodes.append(node)

    def parse_at_rule(self) -> AtRule:
        match = re.compile(r"@([\w-]+)").match(self.text, self.pos)
        if not match:
            raise CSSParseError("Invalid at-rule", self.pos)
        name = match.group(1).lower()
        self.pos = match.end()
        prelude = compact_whitespace(self.read_until("{;}"))

        char = self.peek()
        if char == ";":
            self.pos += 1
            return AtRule(name=name, prelude=prelude)
        if char != "{":
            # @import at end of file without a semicolon
            if self.at_end() or char == "}":
                return AtRule(name=name, prelude=prelude)
            raise CSSParseError(f"Malformed @{name}", self.pos)

        self.pos += 1
        if name in DECLARATION_AT_RULES:
            return AtRule(name=name, prelude=prelude, declarations=self.parse_declarations())
        return AtRule(name=name, prelude=prelude, rules=self.parse_rule_list(nested=True))

    def parse_rule(self) -> Optional[Rule]:
        start = self.pos
        prelude = self.read_until("{};")
        if self.peek() != "{":
            if prelude.strip():
                raise CSSParseError("Expected '{' after selector", start)
            if self.peek() == ";":
                self.pos += 1
            return None
        self.pos += 1
        selectors = [compact_selector(s) for s in split_top_level(prelude, ",")]
        selectors = [s for s in selectors if s]
        return Rule(selectors=selectors, declarations=self.parse_declarations())

    def parse_declarations(self) -> List[Declaration]:
        declarations = []
        while True:
            chunk = self.read_until(";}")
            if self.at_end():
                raise CSSParseError("Unclosed declaration block", self.pos)
            if ":" in chunk:
                name, _, value = chunk.partition(":")
                name = name.strip()
                value = compact_value(value)
                if name and value:
                    declarations.append(Declaration(name=name, value=value))
            elif chunk.strip():
                raise CSSParseError(f"Invalid declaration {chunk.strip()!r}", self.pos)
            char = self.text[self.pos]
            self.pos += 1
            if char == "}":
                return declarations


def parse_css(text: str) -> Stylesheet:
    """
    Parse CSS text into a Stylesheet.

    Args:
        text: Stylesheet source (compiled or minified CSS)

    Returns:
        Stylesheet AST

    Raises:
        CSSParseError: On unbalanced braces or unterminated strings/comments
    """
    parser = _Parser(text)
    nodes = parser.parse_rule_list(nested=False)
    parser.flush_pending(nodes)
    return Stylesheet(nodes=nodes)


def split_top_level(text: str, separator: str) -> List[str]:
    """Split on ``separator`` outside strings, parentheses and brackets."""
    parts = []
    depth = 0
    quote = ""
    start = 0
    i = 0
    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = ""
        elif char in "\"'":
            quote = char
        elif char in "([":
            depth += 1
        elif char in ")]":
            depth = max(depth - 1, 0)
        elif char == separator and depth == 0:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return parts


def _map_outside_strings(text: str, transform) -> str:
    """Apply ``transform`` to the unquoted stretches of ``text`` only."""
    out = []
    i = 0
    start = 0
    while i < len(text):
        char = text[i]
        if char in "\"'":
            out.append(transform(text[start:i]))
            j = i + 1
            while j < len(text) and text[j] != char:
                j += 2 if text[j] == "\\" else 1
            out.append(text[i : j + 1])
            i = j + 1
            start = i
            continue
        i += 1
    out.append(transform(text[start:]))
    return "".join(out)


def compact_whitespace(text: str) -> str:
    """Collapse whitespace runs outside strings to single spaces."""
    return _map_outside_strings(text, lambda s: re.sub(r"\s+", " ", s)).strip()


def compact_value(value: str) -> str:
    """Minify a declaration value without changing its meaning."""

    def squeeze(chunk: str) -> str:
        chunk = re.sub(r"\s+", " ", chunk)
        chunk = re.sub(r"\s*,\s*", ",", chunk)
        chunk = re.sub(r"\s*!\s*important", "!important", chunk, flags=re.IGNORECASE)
        chunk = re.sub(r"\(\s+", "(", chunk)
        return re.sub(r"\s+\)", ")", chunk)

    return _map_outside_strings(value, squeeze).strip()


def compact_selector(selector: str) -> str:
    """Minify one selector: combinators lose their surrounding spaces."""

    def squeeze(chunk: str) -> str:
        chunk = re.sub(r"\s+", " ", chunk)
        return re.sub(r"\s*([>~+])\s*(?![^(]*\))", r"\1", chunk)

    return _map_outside_strings(selector, squeeze).strip()


def _serialize_declarations(declarations: List[Declaration]) -> str:
    return ";".join(f"{d.name}:{d.value}" for d in declarations)


def _serialize_nodes(nodes: List[Node], keep_licenses: bool) -> str:
    out = []
    for node in nodes:
        if isinstance(node, Comment):
            if keep_licenses and node.is_license:
                out.append(f"/*{node.text}*/")
        elif isinstance(node, Rule):
            if node.selectors and node.declarations:
                out.append(
                    ",".join(node.selectors) + "{" + _serialize_declarations(node.declarations) + "}"
                )
        elif isinstance(node, AtRule):
            head = f"@{node.name}" + (f" {node.prelude}" if node.prelude else "")
            if node.declarations is not None:
                out.append(head + "{" + _serialize_declarations(node.declarations) + "}")
            elif node.rules is not None:
                body = _serialize_nodes(node.rules, keep_licenses)
                if body:
                    out.append(head + "{" + body + "}")
            else:
                out.append(head + ";")
    return "".join(out)


def serialize_css(stylesheet: Stylesheet, keep_licenses: bool = True) -> str:
    """
    Serialize a Stylesheet to minified CSS.

    Ordinary comments and empty rules are dropped. License comments are
    kept unless ``keep_licenses`` is False.
    """
    return _serialize_nodes(stylesheet.nodes, keep_licenses)


def minify_css(text: str, keep_licenses: bool = True) -> str:
    """Parse and re-serialize CSS text in minified form."""
    return serialize_css(parse_css(text), keep_licenses=keep_licenses)
