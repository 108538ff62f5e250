"""tree-sitter access for C# sources."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from tree_sitter_language_pack import get_parser

log = logging.getLogger(__name__)

# Grammar name differs between language-pack releases.
GRAMMAR_ALIASES = {
    "c_sharp": "csharp",
    "c#": "csharp",
    "cs": "csharp",
}

CSHARP_GRAMMAR = "csharp"


@lru_cache(maxsize=None)
def csharp_parser():
    return get_parser(GRAMMAR_ALIASES.get(CSHARP_GRAMMAR, CSHARP_GRAMMAR))


def parse_source(source: bytes):
    """Parse C# *source* bytes into a tree-sitter tree."""
    return csharp_parser().parse(source)


def parse_file(path: str | Path) -> tuple[object, bytes]:
    """Read and parse one file; returns ``(tree, source)``."""
    source = Path(path).read_bytes()
    # A UTF-8 BOM would otherwise show up as an ERROR node before the first using.
    if source.startswith(b"\xef\xbb\xbf"):
        source = source[3:]
    tree = parse_source(source)
    if tree.root_node.has_error:
        log.debug("Syntax errors in %s; binding what parsed", path)
    return tree, source


def node_text(node, source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
