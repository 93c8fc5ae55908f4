from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .client import RegistrarClient
from .dispatcher import ToolDispatcher
from .registry import list_mcp_tools, manifest as build_manifest
from .schemas import HealthResponse, InvokeRequest, ToolResponse
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class ToolCallFailed(RuntimeError):
    """Carries an error text back through the MCP server as an ``isError`` result."""


def configure_logging(level: str) -> None:
    # stdout carries the MCP stream, so logs stay on stderr.
    logging.basicConfig(level=level.upper(), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    for noisy in ("httpx", "httpcore", "mcp"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def build_dispatcher(settings: Settings) -> ToolDispatcher:
    return ToolDispatcher(RegistrarClient.from_settings(settings))


def build_mcp_server(dispatcher: ToolDispatcher, settings: Settings) -> Server:
    server: Server = Server(settings.app_name, version=__version__)

    @server.list_tools()
    async def _list_tools() -> List[types.Tool]:
        return list_mcp_tools()

    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        response = await dispatcher.dispatch(name, arguments or {})
        if response.is_error:
            raise ToolCallFailed(response.text)
        return [types.TextContent(type="text", text=response.text)]

    return server


async def serve_stdio(settings: Settings, dispatcher: Optional[ToolDispatcher] = None) -> None:
    server = build_mcp_server(dispatcher or build_dispatcher(settings), settings)
    logger.info("%s running on stdio (registrar: %s)", settings.app_name, settings.base_url)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def create_app(settings: Optional[Settings] = None, dispatcher: Optional[ToolDispatcher] = None) -> FastAPI:
    settings = settings or get_settings()
    dispatcher = dispatcher or build_dispatcher(settings)

    app = FastAPI(title=settings.app_name, version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_dispatcher() -> ToolDispatcher:
        return dispatcher

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", detail=f"registrar={settings.base_url}")

    @app.get("/.well-known/mcp.json")
    async def mcp_manifest() -> Dict[str, Any]:
        return build_manifest(settings.app_name, __version__)

    @app.post("/invoke", response_model=ToolResponse)
    async def invoke(request: InvokeRequest, dispatcher: ToolDispatcher = Depends(get_dispatcher)) -> ToolResponse:
        return await dispatcher.dispatch(request.tool, request.arguments)

    return app


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    transport = settings.normalized_transport()
    if transport == "http":
        import uvicorn

        uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
        return
    asyncio.run(serve_stdio(settings))


if __name__ == "__main__":
    run()
