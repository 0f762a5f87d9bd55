import logging
from fastapi import APIRouter, Depends, HTTPException
from codeplay.api.deps import get_app_settings, get_sandbox
from codeplay.api.ratelimit import enforce_rate_limit
from codeplay.core.config import Settings
from codeplay.core.languages import Language, get_language, supported_tags
from codeplay.schemas.execution import ExecuteRequest, ExecutionResult, RunResult
from codeplay.services.sandbox import SandboxClient, SandboxError, build_payload

router = APIRouter(tags=["execute"])
log = logging.getLogger("execute")

HTML_RESULT = ExecutionResult(
    run=RunResult(
        stdout="",
        stderr="",
        output="HTML is rendered client-side.",
        code=0,
        signal=None,
    )
)


@router.post("/execute", dependencies=[Depends(enforce_rate_limit)])
async def execute(
    payload: ExecuteRequest,
    sandbox: SandboxClient = Depends(get_sandbox),
    settings: Settings = Depends(get_app_settings),
):
    spec = get_language(payload.language)
    if spec is None:
        raise HTTPException(
            400,
            f"Unsupported language: {payload.language}. "
            f"Supported: {', '.join(supported_tags())}",
        )
    if spec.id is Language.html:
        return HTML_RESULT.model_dump(exclude={"compile", "language", "version", "message"})

    stdin = payload.stdin if isinstance(payload.stdin, str) else ""
    body = build_payload(spec, payload.code, stdin, settings)
    try:
        # relayed verbatim so clients see the sandbox's native shape
        return await sandbox.execute(body)
    except SandboxError as e:
        raise HTTPException(e.status_code, e.message) from e
