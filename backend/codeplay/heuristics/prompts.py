"""Infer how many stdin reads a program makes and what to ask the user for.

These are plain regex scans over the editor buffer, re-run on every change.
They never raise: broken or half-typed code simply yields fewer prompts.
"""

import logging
import re
from typing import Callable, Iterable, Mapping

from codeplay.core.languages import Language

GENERIC_PROMPT = "Input:"
STDIN_PROMPT = "Stdin Input:"

_PY_LITERAL_INPUT = re.compile(r"""input\s*\(\s*(['"])((?:[^'"]|\\'|\\")*)\1\s*\)""")
_PY_ANY_INPUT = re.compile(r"input\s*\(")
_PY_STDIN = re.compile(r"sys\.stdin")
_JS_QUESTION = re.compile(r"""question\s*\(\s*(['"])((?:[^'"]|\\'|\\")*)\1""")
_JS_STDIN = re.compile(r"process\.stdin|readline")
_JAVA_SCANNER = re.compile(r"\.next(Line|Int|Double|Boolean)?\s*\(")
_CPP_CIN = re.compile(r"cin\s*>>")
_GO_SCAN = re.compile(r"fmt\.Scan")
_PHP_STDIN = re.compile(r"php://stdin|fgets")

log = logging.getLogger("heuristics")


def _python(code: str) -> list[str]:
    prompts = [m.group(2) for m in _PY_LITERAL_INPUT.finditer(code)]
    # calls without a literal prompt still consume a line each
    missing = len(_PY_ANY_INPUT.findall(code)) - len(prompts)
    prompts.extend([GENERIC_PROMPT] * max(missing, 0))
    if not prompts and _PY_STDIN.search(code):
        prompts.append(STDIN_PROMPT)
    return prompts


def _javascript(code: str) -> list[str]:
    prompts = [m.group(2) for m in _JS_QUESTION.finditer(code)]
    if not prompts and _JS_STDIN.search(code):
        prompts.append(GENERIC_PROMPT)
    return prompts


def _counter(pattern: re.Pattern) -> Callable[[str], list[str]]:
    def count(code: str) -> list[str]:
        return [GENERIC_PROMPT for _ in pattern.finditer(code)]

    return count


def _php(code: str) -> list[str]:
    return [GENERIC_PROMPT] if _PHP_STDIN.search(code) else []


def _none(code: str) -> list[str]:
    return []


PROMPT_EXTRACTORS: dict[Language, Callable[[str], list[str]]] = {
    Language.python: _python,
    Language.javascript: _javascript,
    Language.typescript: _javascript,
    Language.java: _counter(_JAVA_SCANNER),
    Language.cpp: _counter(_CPP_CIN),
    Language.go: _counter(_GO_SCAN),
    Language.php: _php,
    Language.html: _none,
}


def get_input_prompts(language: Language | str, code: str | None) -> list[str]:
    if not code:
        return []
    try:
        extractor = PROMPT_EXTRACTORS.get(Language(language), _none)
        return extractor(code)
    except (ValueError, TypeError, re.error):
        log.debug("prompt extraction skipped for language=%s", language)
        return []


def requires_input(language: Language | str, code: str | None) -> bool:
    return len(get_input_prompts(language, code)) > 0


def build_stdin(prompts: list[str], values: Mapping[int, str] | Iterable[str]) -> str:
    """Join one stdin line per prompt; prompts without a value send ""."""
    if not isinstance(values, Mapping):
        values = dict(enumerate(values))
    return "\n".join(values.get(i) or "" for i in range(len(prompts)))
