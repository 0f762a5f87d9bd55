import re
from codeplay.core.languages import Language, LanguageSpec
from codeplay.schemas.execution import SandboxFile

BOOTSTRAP_FILENAME = "bootstrap.py"

# Whole-word match only: catches input() and x = input, not user_input.
# Strings and comments are not excluded, so print("input") also matches.
PYTHON_INPUT_TOKEN = re.compile(r"\binput\b")

# The sandbox runs the first file and there is no terminal attached, so a
# bare input() on exhausted stdin would raise EOFError. This entry point
# patches input() to fall back to "0" and then runs the user's main.py.
PYTHON_BOOTSTRAP = '''import builtins
import runpy
import sys

try:
    _orig_input = builtins.input
except AttributeError:
    def _orig_input(prompt=""):
        sys.stdout.write(prompt)
        sys.stdout.flush()
        return sys.stdin.readline().rstrip("\\n")


def _safe_input(prompt=""):
    try:
        cleaned = _orig_input(prompt).strip()
    except Exception:
        return "0"
    return cleaned or "0"


builtins.input = _safe_input

try:
    runpy.run_path("main.py", run_name="__main__")
except SystemExit:
    pass
except Exception:
    import traceback

    exc_type, exc_value, exc_tb = sys.exc_info()
    # drop the bootstrap frame so the traceback starts in main.py
    if exc_tb and exc_tb.tb_next:
        exc_tb = exc_tb.tb_next
    traceback.print_exception(exc_type, exc_value, exc_tb)
    sys.exit(1)
'''


def needs_input_shim(language: Language, code: str) -> bool:
    return language is Language.python and bool(PYTHON_INPUT_TOKEN.search(code))


def build_files(spec: LanguageSpec, code: str) -> list[SandboxFile]:
    if needs_input_shim(spec.id, code):
        return [
            SandboxFile(name=BOOTSTRAP_FILENAME, content=PYTHON_BOOTSTRAP),
            SandboxFile(name=spec.filename, content=code),
        ]
    return [SandboxFile(name=spec.filename, content=code)]
