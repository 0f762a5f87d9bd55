import asyncio
import logging
import httpx
from codeplay.core.config import Settings, get_settings
from codeplay.core.languages import LanguageSpec, executable_languages
from codeplay.schemas.execution import SandboxPayload
from codeplay.services.bootstrap import build_files

log = logging.getLogger("sandbox")

EXECUTE_PATH = "/api/v2/execute"
RUNTIMES_PATH = "/api/v2/runtimes"
PACKAGES_PATH = "/api/v2/packages"


class SandboxError(Exception):
    """The sandbox answered, but with an error status."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SandboxUnavailable(SandboxError):
    def __init__(self, message: str = "Failed to connect to execution engine."):
        super().__init__(message, 502)


class SandboxTimeout(SandboxError):
    def __init__(self, message: str = "Execution timed out."):
        super().__init__(message, 504)


def build_payload(
    spec: LanguageSpec, code: str, stdin: str, settings: Settings | None = None
) -> SandboxPayload:
    settings = settings or get_settings()
    return SandboxPayload(
        language=spec.runtime,
        version=spec.version,
        files=build_files(spec, code),
        stdin=stdin,
        args=[],
        run_timeout=settings.RUN_TIMEOUT_MS,
        compile_timeout=settings.COMPILE_TIMEOUT_MS,
        compile_memory_limit=settings.MEMORY_LIMIT,
        run_memory_limit=settings.MEMORY_LIMIT,
    )


def make_http_client(settings: Settings, **kwargs) -> httpx.AsyncClient:
    limits = httpx.Limits(
        max_connections=None,
        max_keepalive_connections=settings.SANDBOX_MAX_KEEPALIVE,
        keepalive_expiry=settings.SANDBOX_KEEPALIVE_EXPIRY_S,
    )
    return httpx.AsyncClient(
        base_url=settings.SANDBOX_URL,
        timeout=settings.SANDBOX_HTTP_TIMEOUT_S,
        limits=limits,
        **kwargs,
    )


class SandboxClient:
    """Thin wrapper over one pooled httpx client shared by all requests."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SandboxClient":
        return cls(make_http_client(settings or get_settings()))

    async def execute(self, payload: SandboxPayload) -> dict:
        ctx = {"language": payload.language}
        try:
            resp = await self.http.post(
                EXECUTE_PATH, json=payload.model_dump(exclude_none=True)
            )
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            log.error(
                "Execution Error [%s]: %s", payload.language, e, extra=ctx
            )
            raise SandboxTimeout() from e
        except httpx.HTTPStatusError as e:
            log.error(
                "Execution Error [%s]: %s",
                payload.language,
                e,
                extra={**ctx, "status_code": e.response.status_code},
            )
            raise SandboxError(
                _upstream_message(e.response), e.response.status_code
            ) from e
        except httpx.TransportError as e:
            log.error(
                "Execution Error [%s]: %s", payload.language, e, extra=ctx
            )
            raise SandboxUnavailable() from e
        try:
            return resp.json()
        except ValueError as e:
            log.error(
                "Execution Error [%s]: malformed sandbox response",
                payload.language,
                extra=ctx,
            )
            raise SandboxError("Execution service unavailable.", 502) from e

    async def list_runtimes(self) -> list[dict]:
        resp = await self.http.get(RUNTIMES_PATH)
        resp.raise_for_status()
        return resp.json()

    async def install_package(self, language: str, version: str) -> None:
        resp = await self.http.post(
            PACKAGES_PATH, json={"language": language, "version": version}
        )
        resp.raise_for_status()

    async def aclose(self):
        await self.http.aclose()


def _upstream_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return "Execution service unavailable."


async def _install_one(client: SandboxClient, spec: LanguageSpec) -> bool:
    try:
        await client.install_package(spec.runtime, spec.version)
        return True
    except httpx.HTTPError as e:
        # the sandbox rejects packages that are already installed
        log.warning(
            "[Auto-Install] Note: %s check ended (%s). This is normal if already installed",
            spec.runtime,
            e,
            extra={"runtime": spec.runtime},
        )
        return False


async def ensure_runtimes_installed(client: SandboxClient) -> dict[str, bool]:
    """Best-effort provisioning of every runtime the playground needs.

    Returns runtime -> whether the install request succeeded. Never raises:
    an unreachable sandbox is logged and the proxy keeps serving.
    """
    log.info("Checking execution engine status...")
    # a non-JSON answer means something other than the sandbox is listening
    try:
        await client.list_runtimes()
    except (httpx.HTTPError, ValueError) as e:
        log.error(
            "Warning: Could not connect to execution engine (%s). "
            "Requests will fail until it becomes available.",
            e,
        )
        return {}

    log.info("Execution engine reachable. Verifying packages in parallel...")
    specs = executable_languages()
    results = await asyncio.gather(*(_install_one(client, s) for s in specs))
    log.info("Language runtime verification complete.")
    return {s.runtime: ok for s, ok in zip(specs, results)}
