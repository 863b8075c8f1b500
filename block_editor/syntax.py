"""
Post-edit syntax check using tree-sitter.

Uses tree-sitter >= 0.22 API with individual language packages.  The check
only reports; matching and writing stay purely textual.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import tree_sitter as ts

logger = logging.getLogger(__name__)

EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "c_sharp",
}


def detect_language(file_path: str) -> Optional[str]:
    """Return the tree-sitter language name for *file_path*, or None."""
    ext = os.path.splitext(file_path)[1].lower()
    return EXTENSION_TO_LANGUAGE.get(ext)


def _get_lang_func(language: str):
    """Return the grammar's language() function, or None if not installed."""
    try:
        if language == "python":
            import tree_sitter_python as m  # type: ignore
            return m.language
        elif language == "javascript":
            import tree_sitter_javascript as m  # type: ignore
            return m.language
        elif language == "typescript":
            import tree_sitter_typescript as m  # type: ignore
            return m.language_typescript
        elif language == "java":
            import tree_sitter_java as m  # type: ignore
            return m.language
        elif language == "c":
            import tree_sitter_c as m  # type: ignore
            return m.language
        elif language == "cpp":
            import tree_sitter_cpp as m  # type: ignore
            return m.language
        elif language == "go":
            import tree_sitter_go as m  # type: ignore
            return m.language
        elif language == "rust":
            import tree_sitter_rust as m  # type: ignore
            return m.language
        elif language == "ruby":
            import tree_sitter_ruby as m  # type: ignore
            return m.language
        elif language == "php":
            import tree_sitter_php as m  # type: ignore
            return m.language_php
        elif language == "c_sharp":
            import tree_sitter_c_sharp as m  # type: ignore
            return m.language
    except ImportError:
        logger.debug("Grammar package for %s is not installed", language)
    return None


_PARSER_CACHE: dict[str, ts.Parser] = {}


def _get_parser(language: str) -> Optional[ts.Parser]:
    if language in _PARSER_CACHE:
        return _PARSER_CACHE[language]
    func = _get_lang_func(language)
    if func is None:
        return None
    parser = ts.Parser(ts.Language(func()))
    _PARSER_CACHE[language] = parser
    return parser


def _first_error_line(node) -> Optional[int]:
    """1-indexed line of the first ERROR or MISSING node under *node*."""
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error:
            line = _first_error_line(child)
            if line is not None:
                return line
    return None


def check_syntax(file_path: str, content: str) -> Optional[str]:
    """Parse *content* as the language of *file_path*.

    Returns a warning message when the parse tree contains errors, or
    None when it is clean or the language cannot be checked.
    """
    language = detect_language(file_path)
    if language is None:
        return None

    parser = _get_parser(language)
    if parser is None:
        return None

    tree = parser.parse(content.encode("utf-8"))
    root = tree.root_node
    if not root.has_error:
        return None

    line = _first_error_line(root)
    where = f" near line {line}" if line is not None else ""
    message = f"{language} syntax error{where} in edited {file_path}"
    logger.warning("[DiffEdit] %s", message)
    return message
