import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable
from codeplay.client.executor import ExecutionOrchestrator
from codeplay.client.storage import SettingsStore, SnippetData
from codeplay.core.languages import LANGUAGES, Language
from codeplay.heuristics.detector import detect_language
from codeplay.heuristics.errors import analyze_error
from codeplay.heuristics.prompts import build_stdin, get_input_prompts
from codeplay.schemas.execution import ExecutionResult

log = logging.getLogger("session")

CRITICAL_ERROR = "Critical execution error. Backend may be offline."
NOT_DETECTED = "Could not automatically detect language."


@dataclass
class ExecutionStat:
    timestamp: str
    duration_ms: int
    language: str
    status: str  # "success" | "error"


class PlaygroundSession:
    """State behind one editor tab.

    Prompts are recomputed whenever code or language changes. At most one
    run is in flight; run() while busy is a no-op.
    """

    def __init__(
        self,
        orchestrator: ExecutionOrchestrator,
        store: SettingsStore | None = None,
        initial: SnippetData | None = None,
    ):
        self.orchestrator = orchestrator
        self.store = store
        initial = initial or (store.load_session() if store else SnippetData.default())
        self.language: Language = initial.language
        self.code: str = initial.code
        self.input_values: dict[int, str] = {}
        self.prompts: list[str] = []
        self.busy = False
        self.output = ""
        self.stderr = ""
        self.error_line: int | None = None
        self.html_preview: str | None = None
        self.stats: list[ExecutionStat] = []
        self._refresh_prompts()

    def _refresh_prompts(self):
        if self.language is Language.html:
            self.prompts = []
        else:
            self.prompts = get_input_prompts(self.language, self.code)

    def _persist(self):
        if self.store is not None:
            self.store.save_session(SnippetData(self.language, self.code))

    def set_code(self, code: str | None):
        self.code = code or ""
        self.error_line = None
        self._refresh_prompts()
        self._persist()

    def set_language(self, language: Language | str):
        language = Language(language)
        current_default = LANGUAGES[self.language].snippet
        pristine = not self.code.strip() or self.code.strip() == current_default.strip()
        if pristine:
            self.code = LANGUAGES[language].snippet
        self.language = language
        self.output = ""
        self.stderr = ""
        self.error_line = None
        self.html_preview = None
        self.input_values = {}
        self._refresh_prompts()
        self._persist()

    def set_input(self, index: int, value: str):
        self.input_values[index] = value

    def auto_detect(
        self,
        confirm: Callable[[Language], bool],
        notify: Callable[[str], None],
    ) -> Language | None:
        detected = detect_language(self.code)
        if detected is None:
            notify(NOT_DETECTED)
        elif detected is not self.language and confirm(detected):
            # switch only the tag; the buffer is the user's code
            self.language = detected
            self._refresh_prompts()
            self._persist()
        return detected

    def stdin(self) -> str:
        return build_stdin(self.prompts, self.input_values)

    def _record(self, started: float, ok: bool):
        self.stats.append(
            ExecutionStat(
                timestamp=datetime.now(timezone.utc).isoformat(),
                duration_ms=int((time.monotonic() - started) * 1000),
                language=LANGUAGES[self.language].name,
                status="success" if ok else "error",
            )
        )

    async def run(self) -> ExecutionResult | None:
        if self.busy:
            return None
        if self.language is Language.html:
            self.html_preview = self.code
            return None

        self.busy = True
        self.error_line = None
        started = time.monotonic()
        try:
            result = await self.orchestrator.execute(self.language, self.code, self.stdin())
            self.output = result.run.output or result.run.stdout
            self.stderr = result.run.stderr
            if result.run.stderr:
                analysis = analyze_error(self.language, result.run.stderr)
                if analysis and analysis.line:
                    self.error_line = analysis.line
            self._record(started, result.run.code == 0)
            return result
        except Exception:
            log.exception("run failed outside the orchestrator")
            self.stderr = CRITICAL_ERROR
            self._record(started, False)
            return None
        finally:
            self.busy = False
