import logging
import re
from dataclasses import dataclass

from codeplay.core.languages import Language

log = logging.getLogger("heuristics")

_COLON_LINE_COL = re.compile(r":(\d+):\d+")

LINE_PATTERNS: dict[Language, re.Pattern] = {
    Language.python: re.compile(r'File ".*", line (\d+)'),
    Language.javascript: _COLON_LINE_COL,
    Language.typescript: _COLON_LINE_COL,
    Language.java: re.compile(r"Main\.java:(\d+):"),
    Language.cpp: _COLON_LINE_COL,
    Language.php: re.compile(r"on line (\d+)"),
    Language.go: re.compile(r":(\d+):"),
}

_JS_HINTS = [
    (
        ("unexpected token", "syntaxerror"),
        "JavaScript Syntax Error: Check for missing brackets }, parentheses ), or semicolons ;.",
    ),
    (
        ("referenceerror",),
        "Reference Error: You are using a variable that doesn't exist.",
    ),
]

# (any-of signatures, hint); first row with a signature in the lowercased
# stderr wins. A signature that is itself a tuple needs all of its parts.
HINT_TABLES: dict[Language, list] = {
    Language.python: [
        (
            ("syntaxerror",),
            "Python Syntax Error: Check for missing colons (:), mismatched parentheses, or incorrect indentation.",
        ),
        (
            ("nameerror",),
            "Python Name Error: You are trying to use a variable or function that hasn't been defined yet.",
        ),
        (
            ("indentationerror",),
            "Indentation Error: Python relies on indentation. Ensure your code blocks are aligned correctly.",
        ),
    ],
    Language.javascript: _JS_HINTS,
    Language.typescript: _JS_HINTS,
    Language.java: [
        (
            ("cannot find symbol",),
            "Java Error: Compiler cannot find a variable or class. Check spelling or missing imports.",
        ),
        (
            ("expected",),
            "Java Syntax Error: Usually missing a semicolon ; or a closing brace }.",
        ),
        (
            (("class", "public", "should be declared in a file"),),
            "Class Name Error: In this environment, ensure your public class is named 'Main'.",
        ),
    ],
    Language.cpp: [
        (
            ("expected",),
            "C++ Syntax Error: Likely missing a semicolon ; or incorrect bracket usage.",
        ),
        (
            ("undeclared identifier",),
            "Undeclared Identifier: You forgot to declare a variable or include a necessary library (like <iostream>).",
        ),
    ],
}


@dataclass(frozen=True)
class ErrorAnalysis:
    friendly: str
    is_hint: bool
    line: int | None = None


def _matches(signature, text: str) -> bool:
    if isinstance(signature, tuple):
        return all(part in text for part in signature)
    return signature in text


def extract_line(language: Language, stderr: str) -> int | None:
    pattern = LINE_PATTERNS.get(language)
    if pattern is None:
        return None
    try:
        match = pattern.search(stderr)
        return int(match.group(1)) if match else None
    except (ValueError, TypeError, IndexError):
        return None


def friendly_hint(language: Language, stderr: str) -> str | None:
    lowered = stderr.lower()
    for signatures, hint in HINT_TABLES.get(language, []):
        if any(_matches(sig, lowered) for sig in signatures):
            return hint
    return None


def analyze_error(language: Language | str, stderr: str | None) -> ErrorAnalysis | None:
    if not stderr:
        return None
    try:
        language = Language(language)
    except ValueError:
        log.debug("no error rules for language=%s", language)
        return None

    line = extract_line(language, stderr)
    hint = friendly_hint(language, stderr)
    if not hint and not line:
        return None
    return ErrorAnalysis(friendly=hint or "", is_hint=hint is not None, line=line)
