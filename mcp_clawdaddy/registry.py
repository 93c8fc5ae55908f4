from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from mcp import types
from pydantic import BaseModel, ConfigDict, Field

from .schemas import DNS_RECORD_TYPES

TOKEN_PREFIX = "clwd_"


class ToolName(str, Enum):
    LOOKUP_DOMAIN = "lookup_domain"
    GET_QUOTE = "get_quote"
    PURCHASE_DOMAIN = "purchase_domain"
    GET_DOMAIN_INFO = "get_domain_info"
    LIST_DNS_RECORDS = "list_dns_records"
    ADD_DNS_RECORD = "add_dns_record"
    UPDATE_DNS_RECORD = "update_dns_record"
    DELETE_DNS_RECORD = "delete_dns_record"
    GET_NAMESERVERS = "get_nameservers"
    SET_NAMESERVERS = "set_nameservers"
    GET_SETTINGS = "get_settings"
    UPDATE_SETTINGS = "update_settings"
    GET_TRANSFER_CODE = "get_transfer_code"
    RECOVER_TOKEN = "recover_token"


class ToolDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: ToolName
    description: str
    input_schema: Dict[str, Any] = Field(default_factory=dict)
    authenticated: bool = False

    @property
    def required(self) -> List[str]:
        return list(self.input_schema.get("required", []))

    @property
    def properties(self) -> Dict[str, Dict[str, Any]]:
        return dict(self.input_schema.get("properties", {}))

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool(name=self.name.value, description=self.description, inputSchema=self.input_schema)

    def manifest_entry(self) -> Dict[str, Any]:
        return {"name": self.name.value, "description": self.description, "input_schema": self.input_schema}


def _domain(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


_TOKEN_PROPERTY = {"type": "string", "description": f"Management token (starts with '{TOKEN_PREFIX}')"}


def _schema(required: List[str], properties: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": "object", "required": required, "properties": properties}


def _managed(description: str, extra: Optional[Dict[str, Dict[str, Any]]] = None, required: Optional[List[str]] = None) -> Dict[str, Any]:
    properties: Dict[str, Dict[str, Any]] = {"domain": _domain(description), "token": dict(_TOKEN_PROPERTY)}
    properties.update(extra or {})
    return _schema(["domain", "token", *(required or [])], properties)


def _record_type(description: str) -> Dict[str, Any]:
    return {"type": "string", "enum": list(DNS_RECORD_TYPES), "description": description}


_DESCRIPTORS = [
    ToolDescriptor(
        name=ToolName.LOOKUP_DOMAIN,
        description=(
            "Check if a domain is available for registration. Returns availability status, "
            "pricing, and registration details. No authentication required."
        ),
        input_schema=_schema(
            ["domain"], {"domain": _domain("The full domain to check (e.g., 'example.com', 'myapp.io')")}
        ),
    ),
    ToolDescriptor(
        name=ToolName.GET_QUOTE,
        description=(
            "Get a purchase quote for a domain including final pricing: base price, service fee "
            "and total cost. Payment is via Stripe (credit/debit card)."
        ),
        input_schema=_schema(["domain"], {"domain": _domain("The domain to get a quote for (e.g., 'example.com')")}),
    ),
    ToolDescriptor(
        name=ToolName.PURCHASE_DOMAIN,
        description=(
            "Purchase a domain via Stripe. Returns a checkout URL where the user completes payment "
            "with a credit/debit card. After payment the management token is shown on the success "
            "page and emailed to the customer. IMPORTANT: Save the management token!"
        ),
        input_schema=_schema(["domain"], {"domain": _domain("The domain to purchase (e.g., 'example.com')")}),
    ),
    ToolDescriptor(
        name=ToolName.GET_DOMAIN_INFO,
        description=(
            "Get an overview of a domain you own including nameservers, settings, and expiration "
            "date. Requires management token."
        ),
        input_schema=_managed("The domain to get info for"),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.LIST_DNS_RECORDS,
        description=(
            "List all DNS records for a domain. Returns record IDs needed for update/delete "
            "operations. Requires management token."
        ),
        input_schema=_managed("The domain to list DNS records for"),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.ADD_DNS_RECORD,
        description=(
            "Add a DNS record to a domain. Supported types: A, AAAA, CNAME, MX, TXT, NS, SRV. "
            "Use '@' for the root domain host. Requires management token."
        ),
        input_schema=_managed(
            "The domain to add the record to",
            {
                "host": {"type": "string", "description": "Hostname/subdomain ('@' for root, 'www' for www, etc.)"},
                "type": _record_type("DNS record type"),
                "answer": {"type": "string", "description": "Record value (IP address, hostname, or text content)"},
                "ttl": {"type": "integer", "description": "Time to live in seconds (default: 300)"},
                "priority": {"type": "integer", "description": "Priority for MX/SRV records"},
            },
            required=["host", "type", "answer"],
        ),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.UPDATE_DNS_RECORD,
        description=(
            "Update an existing DNS record. Get the record_id from list_dns_records. Only the "
            "fields you pass are changed. Requires management token."
        ),
        input_schema=_managed(
            "The domain containing the record",
            {
                "record_id": {"type": "integer", "description": "ID of the record to update (from list_dns_records)"},
                "host": {"type": "string", "description": "New hostname/subdomain (optional)"},
                "type": _record_type("New record type (optional)"),
                "answer": {"type": "string", "description": "New record value (optional)"},
                "ttl": {"type": "integer", "description": "New TTL in seconds (optional)"},
                "priority": {"type": "integer", "description": "New priority for MX/SRV records (optional)"},
            },
            required=["record_id"],
        ),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.DELETE_DNS_RECORD,
        description="Delete a DNS record. Get the record_id from list_dns_records. Requires management token.",
        input_schema=_managed(
            "The domain containing the record",
            {"record_id": {"type": "integer", "description": "ID of the record to delete (from list_dns_records)"}},
            required=["record_id"],
        ),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.GET_NAMESERVERS,
        description="Get the current nameservers for a domain. Requires management token.",
        input_schema=_managed("The domain to get nameservers for"),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.SET_NAMESERVERS,
        description=(
            "Update nameservers for a domain. Common options: Cloudflare (ns1/ns2.cloudflare.com), "
            "Vercel (ns1/ns2.vercel-dns.com), Netlify (dns1/dns2.p01.nsone.net). Requires management token."
        ),
        input_schema=_managed(
            "The domain to update",
            {
                "nameservers": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Nameserver hostnames (e.g., ['ns1.cloudflare.com', 'ns2.cloudflare.com'])",
                }
            },
            required=["nameservers"],
        ),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.GET_SETTINGS,
        description=(
            "Get domain settings including lock status, auto-renew, and privacy settings. "
            "Requires management token."
        ),
        input_schema=_managed("The domain to get settings for"),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.UPDATE_SETTINGS,
        description=(
            "Update domain settings. Lock prevents unauthorized transfers. Auto-renew renews the "
            "domain before expiration. Requires management token."
        ),
        input_schema=_managed(
            "The domain to update",
            {
                "locked": {"type": "boolean", "description": "Enable/disable transfer lock (recommended: true)"},
                "autorenew_enabled": {"type": "boolean", "description": "Enable/disable auto-renewal"},
            },
        ),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.GET_TRANSFER_CODE,
        description=(
            "Get the authorization code needed to transfer a domain to another registrar. The domain "
            "must be unlocked first and cannot be transferred within 60 days of registration (ICANN "
            "policy). Requires management token."
        ),
        input_schema=_managed("The domain to get the transfer code for"),
        authenticated=True,
    ),
    ToolDescriptor(
        name=ToolName.RECOVER_TOKEN,
        description=(
            "Recover a lost management token. Provide the email used during Stripe checkout and a new "
            "token is emailed. WARNING: This invalidates your old token."
        ),
        input_schema=_schema(
            ["email"],
            {
                "email": {"type": "string", "description": "Email address used during Stripe checkout"},
                "domain": _domain("Specific domain to recover (optional - omit to recover all domains)"),
            },
        ),
    ),
]

TOOL_CATALOG: Mapping[ToolName, ToolDescriptor] = MappingProxyType({d.name: d for d in _DESCRIPTORS})

if set(TOOL_CATALOG) != set(ToolName):
    missing = sorted(name.value for name in set(ToolName) - set(TOOL_CATALOG))
    raise RuntimeError(f"Tool catalog is missing descriptors for: {', '.join(missing)}")


def resolve_tool(name: str) -> Optional[ToolName]:
    try:
        return ToolName(name)
    except ValueError:
        return None


def get_descriptor(name: ToolName) -> ToolDescriptor:
    return TOOL_CATALOG[name]


def list_tools() -> List[ToolDescriptor]:
    return list(TOOL_CATALOG.values())


def list_mcp_tools() -> List[types.Tool]:
    return [descriptor.to_mcp_tool() for descriptor in TOOL_CATALOG.values()]


def manifest(app_name: str, version: str) -> Dict[str, Any]:
    return {
        "name": app_name,
        "version": version,
        "description": "ClawDaddy domain registrar MCP service (lookup, purchase, DNS and domain management).",
        "capabilities": {"tools": [descriptor.manifest_entry() for descriptor in TOOL_CATALOG.values()]},
    }
