"""
CSS purge: drop selectors that match nothing in the rendered page.

A selector is kept when every class, id and element name it mentions occurs
as a word somewhere in the HTML (markup, attribute values and inline
scripts alike, so classes toggled from inline JS survive). Pseudo-classes,
pseudo-elements and attribute filters are ignored when matching. A rule is
removed once all of its selectors are gone; conditional at-rules (@media,
@supports, ...) are removed once they are empty.
"""

import re
from dataclasses import dataclass
from typing import List, Set

from vitae.utils.css_parser import AtRule, Node, Rule, Stylesheet

# At-rules whose nested rules are purged; other blocks (@keyframes) are kept whole
CONDITIONAL_AT_RULES = {"media", "supports", "document", "-moz-document", "layer", "container"}

HTML_WORD = re.compile(r"[A-Za-z0-9_-]+")
ATTRIBUTE_FILTER = re.compile(r"\[[^\]]*\]")
PSEUDO = re.compile(r"::?[\w-]+(?:\((?:[^()]|\([^()]*\))*\))?")
CLASS_OR_ID = re.compile(r"[.#]([\w-]+)")
ELEMENT = re.compile(r"(?:^|[\s>+~,])([a-zA-Z][\w-]*)")


@dataclass
class PurgeStats:
    """Counters reported by purge_stylesheet()."""

    rules_total: int = 0
    rules_removed: int = 0
    selectors_removed: int = 0


def extract_html_words(html: str) -> Set[str]:
    """All identifier-like words of a document, lowercased."""
    return {word.lower() for word in HTML_WORD.findall(html)}


def selector_identifiers(selector: str) -> List[str]:
    """
    Classes, ids and element names a selector depends on.

    Examples:
        selector_identifiers("ul.nav > li a:hover")   # ['nav', 'ul', 'li', 'a']
        selector_identifiers("*::before")              # []
    """
    stripped = ATTRIBUTE_FILTER.sub("", selector)
    stripped = PSEUDO.sub("", stripped)
    names = CLASS_OR_ID.findall(stripped)
    # Element names: words not preceded by '.' or '#'
    without_classes = CLASS_OR_ID.sub(" ", stripped)
    names += ELEMENT.findall(without_classes)
    return [name.lower() for name in names]


def selector_is_used(selector: str, words: Set[str]) -> bool:
    return all(name in words for name in selector_identifiers(selector))


def _purge_nodes(nodes: List[Node], words: Set[str], stats: PurgeStats) -> List[Node]:
    kept: List[Node] = []
    for node in nodes:
        if isinstance(node, Rule):
            stats.rules_total += 1
            used = [s for s in node.selectors if selector_is_used(s, words)]
            stats.selectors_removed += len(node.selectors) - len(used)
            if not used:
                stats.rules_removed += 1
                continue
            node.selectors = used
        elif isinstance(node, AtRule) and node.rules is not None and node.name in CONDITIONAL_AT_RULES:
            node.rules = _purge_nodes(node.rules, words, stats)
            if not any(isinstance(child, (Rule, AtRule)) for child in node.rules):
                continue
        kept.append(node)
    return kept


def purge_stylesheet(stylesheet: Stylesheet, html: str) -> PurgeStats:
    """
    Remove unused selectors and rules from a stylesheet in place.

    Args:
        stylesheet: Parsed stylesheet (modified)
        html: Rendered page the stylesheet is inlined into

    Returns:
        PurgeStats with rule counts
    """
    stats = PurgeStats()
    stylesheet.nodes = _purge_nodes(stylesheet.nodes, extract_html_words(html), stats)
    return stats
