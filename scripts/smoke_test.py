"""
Integration smoke test for the Argo CD locator MCP server.

This script spins up:
1. A mock Argo CD service (Starlette) hosting three pretend instances under
   path prefixes: "prod" (pre-shared token, hosts "checkout"), "stage" (login
   required, rejects the credentials), and "qa" (login works, app missing).
2. The MCP SSE server (running in-process via FastMCP's HTTP transport).
3. A FastMCP client that connects over SSE and calls find_argocd_app.

Usage:
    uv run python scripts/smoke_test.py

Expected output is a single match for "prod".
"""

import asyncio
import contextlib
import json
import os
import tempfile
from pathlib import Path

import uvicorn
from fastmcp.client import Client
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from argocd_locator.server import build_server
from argocd_locator.settings import Settings

MOCK_SERVICE_HOST = "127.0.0.1"
MOCK_SERVICE_PORT = 9070
SSE_HOST = "127.0.0.1"
SSE_PORT = 18080

HOSTED_APPS = {"prod": {"checkout"}, "stage": {"checkout"}, "qa": set()}
LOGIN_ALLOWED = {"prod": True, "stage": False, "qa": True}


async def session_endpoint(request: Request) -> JSONResponse:
    instance = request.path_params["instance"]
    payload = await request.json()
    if not LOGIN_ALLOWED.get(instance) or payload.get("username") != "smoke":
        return JSONResponse({"error": "invalid username or password"}, status_code=401)
    return JSONResponse({"token": f"{instance}-session-token"})


async def application_endpoint(request: Request) -> JSONResponse:
    instance = request.path_params["instance"]
    app_name = request.path_params["app_name"]
    if app_name not in HOSTED_APPS.get(instance, set()):
        return JSONResponse(
            {"error": f'applications.argoproj.io "{app_name}" not found', "code": 5},
            status_code=404,
        )
    return JSONResponse({"metadata": {"name": app_name}, "status": {"health": {"status": "Healthy"}}})


def build_mock_service() -> Starlette:
    return Starlette(
        routes=[
            Route("/{instance:str}/api/v1/session", session_endpoint, methods=["POST"]),
            Route(
                "/{instance:str}/api/v1/applications/{app_name:str}",
                application_endpoint,
                methods=["GET"],
            ),
        ],
    )


def write_locator_config(directory: Path) -> Path:
    base = f"http://{MOCK_SERVICE_HOST}:{MOCK_SERVICE_PORT}"
    config = {
        "argocd": {
            "appLocatorMethods": [
                {
                    "type": "config",
                    "instances": [
                        {"name": "prod", "url": f"{base}/prod", "token": "prod-static-token"},
                        {"name": "stage", "url": f"{base}/stage"},
                        {"name": "qa", "url": f"{base}/qa"},
                    ],
                }
            ]
        }
    }
    path = directory / "argocd.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


async def run_uvicorn_app(app: Starlette, host: str, port: int) -> uvicorn.Server:
    config = uvicorn.Config(app, host=host, port=port, log_level="error")
    server = uvicorn.Server(config)

    async def _serve() -> None:
        await server.serve()

    asyncio.create_task(_serve())
    # Give the server a moment to bind the port.
    await asyncio.sleep(0.3)
    return server


async def run_smoke_flow(config_dir: Path) -> None:
    print("Starting mock Argo CD service...")
    mock_server = await run_uvicorn_app(build_mock_service(), MOCK_SERVICE_HOST, MOCK_SERVICE_PORT)

    os.environ["ARGOCD_CONFIG_FILE"] = str(write_locator_config(config_dir))
    os.environ["ARGOCD_USERNAME"] = "smoke"
    os.environ["ARGOCD_PASSWORD"] = "smoke-password"
    os.environ["MCP_SSE_PORT"] = str(SSE_PORT)
    settings = Settings.load()

    app_server = build_server(settings)
    app_server.startup()

    async def _run_sse() -> None:
        await app_server.serve_sse_async(host=SSE_HOST)

    print("Starting MCP SSE server...")
    sse_task = asyncio.create_task(_run_sse())
    await asyncio.sleep(0.5)

    client = Client(f"http://{SSE_HOST}:{SSE_PORT}/sse", name="smoke-client")

    try:
        async with client:
            print("Calling find_argocd_app tool...")
            result = await client.call_tool("find_argocd_app", {"name": "checkout"})
            data = getattr(result, "data", result)
            print("find_argocd_app result:", data)
            instances = data["instances"]
            assert [item["name"] for item in instances] == ["prod"], instances
            print("Smoke test succeeded")
    finally:
        print("Stopping MCP SSE server...")
        sse_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sse_task
        await app_server.ashutdown()

        print("Stopping mock Argo CD service...")
        mock_server.should_exit = True
        await asyncio.sleep(0.2)


if __name__ == "__main__":
    try:
        with tempfile.TemporaryDirectory() as tmp:
            asyncio.run(run_smoke_flow(Path(tmp)))
    except KeyboardInterrupt:
        print("Smoke test interrupted.")
