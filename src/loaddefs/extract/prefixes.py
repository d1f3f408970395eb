"""Prefix compression: the covering prefix set of a file's definitions.

A file registers the prefixes of the names it defines, so that looking up
an unknown symbol can find the file that would define it. The set is
computed from a radix tree of the names: root edges are kept when they
look like real package prefixes, too short ones are expanded one level,
and what is still too short is dropped with a warning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from loaddefs.config.constants import COOKIE_REGEXP
from loaddefs.core.logging import get_logger
from loaddefs.extract.radix import RadixTree
from loaddefs.extract.records import PrefixDecl

_DEFINITION_RE = re.compile(
    r"^\((def[^ \t\n]+)[ \t\n]+['(]*([^' ()\"\n]+)[\n \t]",
    re.MULTILINE,
)


def is_punctuation(ch: str) -> bool:
    return not ch.isalnum() and not ch.isspace()


def _keep_as_is(prefix: str, tree: RadixTree, subtree: int) -> bool:
    if len(prefix) > 2 and prefix != "def":
        return True
    # Short, but ends in a separator: "c-" is a real prefix.
    if len(prefix) >= 2 and is_punctuation(prefix[-1]):
        return True
    # One of the names is the prefix itself; nothing to expand.
    return tree.lookup("", subtree) is not None


def _long_enough(prefix: str) -> bool:
    return len(prefix) > 2 or (len(prefix) == 2 and any(is_punctuation(ch) for ch in prefix))


def make_prefixes(names: Iterable[str], module: str) -> PrefixDecl | None:
    """Covering prefix set for ``names``, or None when ``names`` is empty.

    Every name that is not dropped has exactly one prefix in the result
    that is a string prefix of it. Never raises.
    """
    tree = RadixTree()
    for name in names:
        tree.insert(name)

    candidates: list[tuple[str, int]] = []
    for prefix, subtree in tree.iter_subtrees():
        if _keep_as_is(prefix, tree, subtree):
            candidates.append((prefix, subtree))
        else:
            candidates.extend(
                (prefix + label, child) for label, child in tree.iter_subtrees(subtree)
            )
    if not candidates:
        return None

    log = get_logger("prefixes")
    kept: list[str] = []
    for prefix, subtree in candidates:
        if _long_enough(prefix):
            kept.append(prefix)
            continue
        affects = [prefix + key for key, _ in tree.iter_mappings(subtree)]
        log.warning("prefix_not_registered", file=module, prefix=prefix, affects=affects)
    return PrefixDecl(module=module, prefixes=tuple(sorted(kept)))


def collect_definition_names(
    text: str,
    ignored: Iterable[str] = (),
    cookie_re: str = COOKIE_REGEXP,
) -> list[str]:
    """Names introduced by top-level ``(defXXX NAME ...)`` forms in ``text``.

    Definitions with an ignored head, or already marked for autoloading by
    a cookie on the previous line, are skipped.
    """
    ignored = frozenset(ignored)
    cookie = re.compile(cookie_re, re.MULTILINE)
    names: list[str] = []
    for m in _DEFINITION_RE.finditer(text):
        if m.group(1) in ignored:
            continue
        if m.start() > 0:
            line_start = text.rfind("\n", 0, m.start() - 1) + 1
            if cookie.match(text, line_start, m.start()):
                continue
        names.append(m.group(2))
    return names
