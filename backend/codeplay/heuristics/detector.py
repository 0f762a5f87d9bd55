from codeplay.core.languages import Language

# Scanned top to bottom, first hit wins. The generic JS/TS markers sit at the
# end so that e.g. Go code with a stray "const " is still reported as Go.
DETECTION_TABLE: list[tuple[str, Language]] = [
    ("def ", Language.python),
    ("import sys", Language.python),
    ("print(", Language.python),
    ("if __name__ ==", Language.python),
    ("#include <iostream>", Language.cpp),
    ("using namespace std", Language.cpp),
    ("int main()", Language.cpp),
    ("public class Main", Language.java),
    ("System.out.println", Language.java),
    ("<!DOCTYPE html>", Language.html),
    ("<html>", Language.html),
    ("package main", Language.go),
    ("func main()", Language.go),
    ("<?php", Language.php),
    ("console.log", Language.javascript),
    ("const ", Language.javascript),
    ("interface ", Language.typescript),
    (": number", Language.typescript),
    (": string", Language.typescript),
]


def detect_language(code: str | None) -> Language | None:
    if not code or not code.strip():
        return None
    for marker, language in DETECTION_TABLE:
        if marker in code:
            return language
    return None
