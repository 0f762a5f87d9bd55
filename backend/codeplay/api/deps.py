# backend/codeplay/api/deps.py
from fastapi import Request
from codeplay.core.config import Settings, get_settings
from codeplay.services.sandbox import SandboxClient


async def get_sandbox(request: Request) -> SandboxClient:
    return request.app.state.sandbox


def get_app_settings() -> Settings:
    return get_settings()
