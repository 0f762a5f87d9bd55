from typing import Any
from pydantic import BaseModel, ConfigDict, Field


class ExecuteRequest(BaseModel):
    language: str = Field(min_length=1)
    code: str
    # anything that isn't text is forwarded as an empty stdin
    stdin: Any = None


class SandboxFile(BaseModel):
    name: str
    content: str


class SandboxPayload(BaseModel):
    language: str
    version: str
    files: list[SandboxFile]
    stdin: str = ""
    args: list[str] = Field(default_factory=list)
    run_timeout: int
    compile_timeout: int
    compile_memory_limit: int | None = None
    run_memory_limit: int | None = None


class RunResult(BaseModel):
    # sandbox fields we do not model (memory, cpu_time, ...) pass through
    model_config = ConfigDict(extra="allow")

    stdout: str = ""
    stderr: str = ""
    output: str = ""
    code: int | None = None
    signal: str | None = None


class ExecutionResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    run: RunResult
    compile: RunResult | None = None
    language: str | None = None
    version: str | None = None
    message: str | None = None
