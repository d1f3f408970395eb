"""Configuration constants.

This module contains values that are fixed by the Emacs Lisp conventions the
generated manifests follow. Defaults that users may override live in
models.py and reference the tuples below.
"""

# =============================================================================
# Source conventions
# =============================================================================

COOKIE_REGEXP = r"^;;;###(?:([^ \t\n]+?)-)?autoload"
"""Autoload cookie. Group 1 is the name of a tagged cookie (foo-autoload)."""

SUBDIRS_MARKER = "subdirs.el"
"""File whose presence keeps a directory component in the load name."""

AUTOLOAD_END = ":autoload-end"
"""Marker inside an expansion after which forms are not extracted."""

LOCAL_VARIABLES_WINDOW = 1000
"""How far from the end of a file the Local Variables block is searched."""

# =============================================================================
# Prefix computation
# =============================================================================

DEFAULT_IGNORED_DEFINITIONS: tuple[str, ...] = (
    "define-obsolete-function-alias",
    "define-obsolete-variable-alias",
    "define-category",
    "define-key",
    "define-key-after",
    "define-keymap",
    "defgroup",
    "defface",
    "defadvice",
    "def-edebug-spec",
    "define-widget",
    "define-erc-module",
    "define-erc-response-handler",
    "defun-rcirc-command",
    "define-short-documentation-group",
    "def-edebug-elem-spec",
    "define-ibuffer-column",
    "define-ibuffer-sorter",
)
"""Definition heads that do not introduce a name worth a prefix."""

DEFAULT_PREFIX_DESTINATION_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("/cedet/srecode/", "cedet/srecode/loaddefs.el"),
    ("/cedet/semantic/", "cedet/semantic/loaddefs.el"),
)
"""Legacy subtrees whose prefix records go to their own loaddefs file."""

# =============================================================================
# Manifest layout
# =============================================================================

PLACEHOLDER_TIMESTAMP = "(0 0 0 0)"
"""Section timestamp written when timestamps are disabled."""

SECTION_TRAILER = ";;;***"

END_OF_SCRAPED_DATA = ";;; End of scraped data"
