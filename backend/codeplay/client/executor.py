"""Client-side execution: primary proxy first, public sandbox as fallback.

Every path ends in an ExecutionResult. Callers never see an exception and
never have to know which endpoint served the run.
"""

import enum
import logging
from dataclasses import dataclass
import httpx
from pydantic import ValidationError
from codeplay.core.config import get_settings
from codeplay.core.languages import LANGUAGES, Language
from codeplay.schemas.execution import ExecutionResult, RunResult

log = logging.getLogger("executor")

HTML_PREVIEW_RESULT = ExecutionResult(
    run=RunResult(
        stdout="Rendering HTML Preview...",
        stderr="",
        output="HTML Preview Active",
        code=0,
        signal=None,
    )
)


class OutcomeStatus(str, enum.Enum):
    success = "success"
    recovered = "recovered"
    failed = "failed"


@dataclass
class ExecutionOutcome:
    status: OutcomeStatus
    result: ExecutionResult
    error: str | None = None


class AttemptFailed(Exception):
    def __init__(self, message: str, network: bool):
        super().__init__(message)
        self.message = message
        self.network = network


def is_network_failure(exc: Exception) -> bool:
    """Transport errors and 5xx answers; a 4xx is the server's final word."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            data = exc.response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
    return str(exc) or "Execution service unavailable. Try again later."


def failure_result(message: str) -> ExecutionResult:
    return ExecutionResult(
        run=RunResult(
            stdout="",
            stderr=f"System Error: {message}",
            output="",
            code=1,
            signal="ERROR",
        ),
        message=message,
    )


def fallback_payload(language: Language, code: str, stdin: str) -> dict:
    spec = LANGUAGES[language]
    return {
        "language": spec.runtime,
        "version": spec.version,
        "files": [{"name": spec.filename, "content": code}],
        "stdin": stdin,
        "args": [],
        "run_timeout": 5000,
        "compile_timeout": 10000,
    }


class ExecutionOrchestrator:
    def __init__(
        self,
        backend_url: str | None = None,
        fallback_url: str | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.backend_url = backend_url or settings.BACKEND_URL
        self.fallback_url = fallback_url or settings.PUBLIC_SANDBOX_URL
        self.http = http or httpx.AsyncClient(timeout=settings.CLIENT_HTTP_TIMEOUT_S)

    async def _post(self, url: str, body: dict) -> ExecutionResult:
        try:
            resp = await self.http.post(url, json=body)
            resp.raise_for_status()
            return ExecutionResult.model_validate(resp.json())
        except httpx.HTTPError as e:
            raise AttemptFailed(_error_message(e), is_network_failure(e)) from e
        except (ValueError, ValidationError) as e:
            raise AttemptFailed(f"Malformed response from {url}", False) from e

    async def run(
        self, language: Language | str, code: str, stdin: str = ""
    ) -> ExecutionOutcome:
        try:
            language = Language(language)
        except ValueError:
            message = f"Unsupported language: {language}"
            return ExecutionOutcome(OutcomeStatus.failed, failure_result(message), message)
        if language is Language.html:
            return ExecutionOutcome(OutcomeStatus.success, HTML_PREVIEW_RESULT.model_copy(deep=True))

        try:
            result = await self._post(
                self.backend_url,
                {"language": language.value, "code": code, "stdin": stdin},
            )
            return ExecutionOutcome(OutcomeStatus.success, result)
        except AttemptFailed as e:
            primary = e

        log.warning(
            "Primary execution service failed (%s), network=%s",
            primary.message,
            primary.network,
            extra={"language": language.value},
        )
        if primary.network:
            try:
                result = await self._post(
                    self.fallback_url, fallback_payload(language, code, stdin)
                )
                return ExecutionOutcome(OutcomeStatus.recovered, result, primary.message)
            except AttemptFailed as e:
                log.error(
                    "Fallback execution failed: %s",
                    e.message,
                    extra={"language": language.value, "outcome": OutcomeStatus.failed.value},
                )

        return ExecutionOutcome(
            OutcomeStatus.failed, failure_result(primary.message), primary.message
        )

    async def execute(
        self, language: Language | str, code: str, stdin: str = ""
    ) -> ExecutionResult:
        return (await self.run(language, code, stdin)).result

    async def aclose(self):
        await self.http.aclose()
