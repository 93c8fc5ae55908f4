from __future__ import annotations

import unittest
from typing import List

import httpx
from fastapi.testclient import TestClient
from mcp import types

from mcp_clawdaddy import main as server_main
from mcp_clawdaddy.client import RegistrarClient
from mcp_clawdaddy.dispatcher import ToolDispatcher
from mcp_clawdaddy.settings import Settings


def _settings() -> Settings:
    return Settings(CLAWDADDY_BASE_URL="https://registrar.test", _env_file=None)  # type: ignore[call-arg]


class RecordingDispatcher:
    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []

    def build(self) -> ToolDispatcher:
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(200, json={"records": []})

        return ToolDispatcher(RegistrarClient("https://registrar.test", transport=httpx.MockTransport(handler)))


class HttpBridgeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.recorder = RecordingDispatcher()
        self.client = TestClient(server_main.create_app(_settings(), self.recorder.build()))

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_manifest_lists_tools(self) -> None:
        payload = self.client.get("/.well-known/mcp.json").json()
        names = [tool["name"] for tool in payload["capabilities"]["tools"]]
        self.assertIn("list_dns_records", names)
        self.assertEqual(len(names), 14)

    def test_invoke_success(self) -> None:
        response = self.client.post(
            "/invoke", json={"tool": "list_dns_records", "arguments": {"domain": "a.io", "token": "clwd_x"}}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"text": "No DNS records configured.", "is_error": False})

    def test_invoke_validation_error(self) -> None:
        response = self.client.post("/invoke", json={"tool": "get_settings", "arguments": {"domain": "a.io"}})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["is_error"])
        self.assertEqual(body["text"], "Error: Invalid arguments: missing required field(s): token")
        self.assertEqual(self.recorder.requests, [])


class StdioServerTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.recorder = RecordingDispatcher()
        self.server = server_main.build_mcp_server(self.recorder.build(), _settings())

    async def test_list_tools(self) -> None:
        handler = self.server.request_handlers[types.ListToolsRequest]
        result = await handler(types.ListToolsRequest(method="tools/list"))
        self.assertEqual(len(result.root.tools), 14)

    async def test_call_tool_success(self) -> None:
        handler = self.server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(
                name="list_dns_records", arguments={"domain": "a.io", "token": "clwd_x"}
            ),
        )
        result = await handler(request)
        self.assertFalse(result.root.isError)
        self.assertEqual(result.root.content[0].text, "No DNS records configured.")

    async def test_call_tool_error_sets_flag(self) -> None:
        handler = self.server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="lookup_domain", arguments={}),
        )
        result = await handler(request)
        self.assertTrue(result.root.isError)
        self.assertEqual(result.root.content[0].text, "Error: Invalid arguments: missing required field(s): domain")
        self.assertEqual(self.recorder.requests, [])


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        self.assertEqual(settings.base_url, "https://clawdaddy.app")
        self.assertEqual(settings.user_agent, "ClawDaddy-MCP/1.0")
        self.assertEqual(settings.normalized_transport(), "stdio")
        self.assertEqual(settings.cors_origins(), ["*"])

    def test_client_uses_injected_base_url(self) -> None:
        client = server_main.build_dispatcher(_settings()).client
        self.assertEqual(client.base_url, "https://registrar.test")

    def test_rejects_unknown_transport(self) -> None:
        settings = Settings(CLAWDADDY_TRANSPORT="carrier-pigeon", _env_file=None)  # type: ignore[call-arg]
        with self.assertRaises(ValueError):
            settings.normalized_transport()


if __name__ == "__main__":
    unittest.main()
