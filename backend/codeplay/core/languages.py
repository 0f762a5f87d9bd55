import enum
from dataclasses import dataclass


class Language(str, enum.Enum):
    python = "python"
    javascript = "javascript"
    typescript = "typescript"
    java = "java"
    cpp = "cpp"
    go = "go"
    php = "php"
    html = "html"


@dataclass(frozen=True)
class LanguageSpec:
    """Everything that varies per language: how it is shown in the editor,
    which sandbox runtime executes it and what the entry file is called."""

    id: Language
    name: str
    extension: str
    runtime: str
    version: str
    filename: str
    snippet: str


LANGUAGES: dict[Language, LanguageSpec] = {
    Language.python: LanguageSpec(
        id=Language.python,
        name="Python",
        extension="py",
        runtime="python",
        version="3.10.0",
        filename="main.py",
        snippet='print("Hello from Python!")',
    ),
    Language.javascript: LanguageSpec(
        id=Language.javascript,
        name="JavaScript",
        extension="js",
        runtime="javascript",
        version="18.15.0",
        filename="main.js",
        snippet='console.log("Hello from JavaScript!");',
    ),
    Language.typescript: LanguageSpec(
        id=Language.typescript,
        name="TypeScript",
        extension="ts",
        runtime="typescript",
        version="5.0.3",
        filename="index.ts",
        snippet=(
            'const message: string = "Hello from TypeScript!";\n'
            "console.log(message);"
        ),
    ),
    Language.java: LanguageSpec(
        id=Language.java,
        name="Java",
        extension="java",
        runtime="java",
        version="15.0.2",
        filename="Main.java",
        snippet=(
            "public class Main {\n"
            "    public static void main(String[] args) {\n"
            '        System.out.println("Hello from Java!");\n'
            "    }\n"
            "}"
        ),
    ),
    Language.cpp: LanguageSpec(
        id=Language.cpp,
        name="C++",
        extension="cpp",
        runtime="cpp",
        version="10.2.0",
        filename="main.cpp",
        snippet=(
            "#include <iostream>\n"
            "using namespace std;\n"
            "\n"
            "int main() {\n"
            '    cout << "Hello from C++!" << endl;\n'
            "    return 0;\n"
            "}"
        ),
    ),
    Language.go: LanguageSpec(
        id=Language.go,
        name="Go",
        extension="go",
        runtime="go",
        version="1.16.2",
        filename="main.go",
        snippet=(
            "package main\n"
            'import "fmt"\n'
            "\n"
            "func main() {\n"
            '    fmt.Println("Hello from Go!")\n'
            "}"
        ),
    ),
    Language.php: LanguageSpec(
        id=Language.php,
        name="PHP",
        extension="php",
        runtime="php",
        version="8.2.3",
        filename="main.php",
        snippet='<?php\necho "Hello from PHP!";\n?>',
    ),
    Language.html: LanguageSpec(
        id=Language.html,
        name="HTML5",
        extension="html",
        runtime="html",
        version="5.0.0",
        filename="index.html",
        snippet=(
            "<!DOCTYPE html>\n"
            "<html>\n"
            "<body>\n"
            "<h1>Hello from HTML5</h1>\n"
            "</body>\n"
            "</html>"
        ),
    ),
}


def get_language(tag: str) -> LanguageSpec | None:
    try:
        return LANGUAGES[Language(tag)]
    except ValueError:
        return None


def supported_tags() -> list[str]:
    return [lang.value for lang in LANGUAGES]


def executable_languages() -> list[LanguageSpec]:
    """Languages that need a sandbox runtime (html renders in the browser)."""
    return [spec for spec in LANGUAGES.values() if spec.id is not Language.html]
