from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from .client import BackendError, RegistrarClient
from .formatters import (
    format_dns_delete,
    format_dns_record,
    format_dns_records,
    format_domain_info,
    format_error,
    format_lookup_result,
    format_nameservers,
    format_purchase_result,
    format_quote_result,
    format_recover_result,
    format_settings,
    format_transfer,
)
from .registry import ToolDescriptor, ToolName, get_descriptor, resolve_tool
from .schemas import PurchaseError, ToolResponse

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ToolArgumentError(ValueError):
    """Raised when tool arguments do not satisfy the tool's input schema."""


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _coerce_integer(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ToolArgumentError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ToolArgumentError(f"{field} must be an integer")


def _coerce_boolean(field: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ToolArgumentError(f"{field} must be a boolean")


def _coerce_string(field: str, value: Any, spec: Dict[str, Any]) -> str:
    if not isinstance(value, str):
        raise ToolArgumentError(f"{field} must be a string")
    allowed = spec.get("enum")
    if allowed:
        normalized = value.strip().upper()
        if normalized not in allowed:
            raise ToolArgumentError(f"Unsupported {field} '{value}' (expected one of: {', '.join(allowed)})")
        return normalized
    return value


def _coerce_string_list(field: str, value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    if isinstance(value, str):
        return _split_csv(value)
    raise ToolArgumentError(f"{field} must be an array or comma-delimited string")


def validate_arguments(descriptor: ToolDescriptor, arguments: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Check ``arguments`` against the descriptor schema and return cleaned values.

    Only properties declared in the schema are kept. Absent optionals are left
    out entirely so they never reach the registrar.
    """

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ToolArgumentError("Invalid arguments: expected an object")

    properties = descriptor.properties
    missing = [name for name in descriptor.required if _is_missing(arguments.get(name))]
    if missing:
        raise ToolArgumentError(f"Invalid arguments: missing required field(s): {', '.join(missing)}")

    cleaned: Dict[str, Any] = {}
    for name, spec in properties.items():
        value = arguments.get(name)
        kind = spec.get("type")
        if value is None:
            continue
        if name not in descriptor.required and (kind != "string" or spec.get("enum")) and _is_missing(value):
            continue
        try:
            if kind == "integer":
                cleaned[name] = _coerce_integer(name, value)
            elif kind == "boolean":
                cleaned[name] = _coerce_boolean(name, value)
            elif kind == "array":
                cleaned[name] = _coerce_string_list(name, value)
            else:
                cleaned[name] = _coerce_string(name, value, spec)
        except ToolArgumentError as exc:
            raise ToolArgumentError(f"Invalid arguments: {exc}") from exc

    # Comma strings can still collapse to an empty list.
    for name in descriptor.required:
        if _is_missing(cleaned.get(name)):
            raise ToolArgumentError(f"Invalid arguments: missing required field(s): {name}")

    if "record_id" in cleaned and cleaned["record_id"] <= 0:
        raise ToolArgumentError("Invalid arguments: record_id must be a positive integer")
    if "domain" in cleaned:
        cleaned["domain"] = cleaned["domain"].strip()
    return cleaned


Handler = Callable[["ToolDispatcher", Dict[str, Any]], Awaitable[ToolResponse]]


def _ok(text: str) -> ToolResponse:
    return ToolResponse(text=text, is_error=False)


async def _lookup_domain(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    return _ok(format_lookup_result(await self.client.lookup_domain(args["domain"])))


async def _get_quote(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    return _ok(format_quote_result(await self.client.get_quote(args["domain"])))


async def _purchase_domain(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    outcome = await self.client.purchase_domain(args["domain"])
    return ToolResponse(text=format_purchase_result(outcome), is_error=isinstance(outcome, PurchaseError))


async def _get_domain_info(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    return _ok(format_domain_info(await self.client.get_domain_info(args["domain"], args["token"])))


async def _list_dns_records(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    return _ok(format_dns_records(await self.client.list_dns_records(args["domain"], args["token"])))


def _record_fields(args: Dict[str, Any]) -> Dict[str, Any]:
    return {key: args[key] for key in ("host", "type", "answer", "ttl", "priority") if key in args}


async def _add_dns_record(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    record = await self.client.add_dns_record(args["domain"], args["token"], _record_fields(args))
    return _ok(format_dns_record(record, "DNS Record Created:"))


async def _update_dns_record(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    record = await self.client.update_dns_record(
        args["domain"], args["token"], args["record_id"], _record_fields(args)
    )
    return _ok(format_dns_record(record, "DNS Record Updated:"))


async def _delete_dns_record(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    result = await self.client.delete_dns_record(args["domain"], args["token"], args["record_id"])
    return _ok(format_dns_delete(result))


async def _get_nameservers(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    return _ok(format_nameservers(await self.client.get_nameservers(args["domain"], args["token"])))


async def _set_nameservers(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    result = await self.client.set_nameservers(args["domain"], args["token"], args["nameservers"])
    return _ok(format_nameservers(result, heading="Nameservers updated!"))


async def _get_settings(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    return _ok(format_settings(await self.client.get_settings(args["domain"], args["token"])))


async def _update_settings(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    changes: Dict[str, Any] = {}
    if "locked" in args:
        changes["locked"] = args["locked"]
    if "autorenew_enabled" in args:
        changes["autorenewEnabled"] = args["autorenew_enabled"]
    result = await self.client.update_settings(args["domain"], args["token"], changes)
    return _ok(format_settings(result, heading="Settings updated!"))


async def _get_transfer_code(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    return _ok(format_transfer(await self.client.get_transfer_code(args["domain"], args["token"])))


async def _recover_token(self: "ToolDispatcher", args: Dict[str, Any]) -> ToolResponse:
    result = await self.client.recover_token(args["email"], args.get("domain"))
    return _ok(format_recover_result(result))


TOOL_HANDLERS: Dict[ToolName, Handler] = {
    ToolName.LOOKUP_DOMAIN: _lookup_domain,
    ToolName.GET_QUOTE: _get_quote,
    ToolName.PURCHASE_DOMAIN: _purchase_domain,
    ToolName.GET_DOMAIN_INFO: _get_domain_info,
    ToolName.LIST_DNS_RECORDS: _list_dns_records,
    ToolName.ADD_DNS_RECORD: _add_dns_record,
    ToolName.UPDATE_DNS_RECORD: _update_dns_record,
    ToolName.DELETE_DNS_RECORD: _delete_dns_record,
    ToolName.GET_NAMESERVERS: _get_nameservers,
    ToolName.SET_NAMESERVERS: _set_nameservers,
    ToolName.GET_SETTINGS: _get_settings,
    ToolName.UPDATE_SETTINGS: _update_settings,
    ToolName.GET_TRANSFER_CODE: _get_transfer_code,
    ToolName.RECOVER_TOKEN: _recover_token,
}

if set(TOOL_HANDLERS) != set(ToolName):
    _unhandled = sorted(name.value for name in set(ToolName) - set(TOOL_HANDLERS))
    raise RuntimeError(f"No dispatcher handler for: {', '.join(_unhandled)}")


class ToolDispatcher:
    """Routes a tool call to the registrar and always answers with text."""

    def __init__(self, client: RegistrarClient) -> None:
        self.client = client

    async def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResponse:
        tool = resolve_tool(name)
        if tool is None:
            logger.warning("Rejected call to unknown tool %r", name)
            return ToolResponse(text=format_error(f"Unknown tool: {name}"), is_error=True)

        try:
            args = validate_arguments(get_descriptor(tool), arguments)
            logger.info("Invoking %s for %s", tool.value, args.get("domain") or "-")
            return await TOOL_HANDLERS[tool](self, args)
        except ToolArgumentError as exc:
            logger.info("%s rejected: %s", tool.value, exc)
            return ToolResponse(text=format_error(str(exc)), is_error=True)
        except BackendError as exc:
            return ToolResponse(text=format_error(exc.message), is_error=True)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure in %s", tool.value)
            return ToolResponse(text=format_error(str(exc) or exc.__class__.__name__), is_error=True)
