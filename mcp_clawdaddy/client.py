from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .schemas import (
    DeleteResult,
    DnsListResult,
    DnsRecord,
    DomainInfo,
    LookupResult,
    NameserversResult,
    PurchaseOutcome,
    QuoteResult,
    RecoverResult,
    SettingsResult,
    TransferResult,
    parse_purchase_result,
)
from .settings import DEFAULT_USER_AGENT, Settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BackendError(RuntimeError):
    """Raised when the registrar cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RegistrarClient:
    """Issues one HTTP request per operation against the registrar API."""

    def __init__(
        self,
        base_url: str,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> "RegistrarClient":
        return cls(settings.base_url, user_agent=settings.user_agent, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, *segments: str) -> str:
        return self._base_url + "/api/" + "/".join(segments)

    def _headers(self, token: Optional[str] = None, *, has_body: bool = False) -> Dict[str, str]:
        headers = {"User-Agent": self._user_agent, "Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        action: str,
        method: str,
        url: str,
        *,
        token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        prefix_status: bool = False,
    ) -> httpx.Response:
        headers = self._headers(token, has_body=body is not None)
        logger.debug("%s %s", method, url)
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.request(method, url, params=params, json=body, headers=headers)
            except httpx.RequestError as exc:
                detail = str(exc) or exc.__class__.__name__
                logger.warning("%s request to %s failed: %s", action, url, detail)
                raise BackendError(f"{action} failed: {detail}") from exc

        if response.is_success:
            return response

        status_text = response.reason_phrase or f"HTTP {response.status_code}"
        if prefix_status:
            status_text = f"{action} failed: {status_text}"
        message = _error_message(response) or status_text
        logger.warning("%s returned HTTP %s: %s", action, response.status_code, message)
        raise BackendError(message, status_code=response.status_code)

    @staticmethod
    def _json(action: str, response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendError(f"{action} failed: registrar returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise BackendError(f"{action} failed: unexpected response shape")
        return payload

    @staticmethod
    def _parse(action: str, model: Type[ModelT], payload: Dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
            raise BackendError(f"{action} failed: unexpected response (invalid fields: {', '.join(fields)})") from exc

    # Unauthenticated operations

    async def lookup_domain(self, domain: str) -> LookupResult:
        action = "Lookup"
        response = await self._request(action, "GET", self._url("lookup", _encode(domain)), prefix_status=True)
        payload = self._json(action, response)
        payload.setdefault("fqdn", domain)
        return self._parse(action, LookupResult, payload)

    async def get_quote(self, domain: str) -> QuoteResult:
        action = "Quote"
        response = await self._request(
            action, "GET", self._url("purchase", _encode(domain), "quote"), prefix_status=True
        )
        payload = self._json(action, response)
        payload.setdefault("domain", domain)
        return self._parse(action, QuoteResult, payload)

    async def purchase_domain(self, domain: str) -> PurchaseOutcome:
        action = "Purchase"
        response = await self._request(action, "POST", self._url("purchase", _encode(domain)))
        payload = self._json(action, response)
        try:
            return parse_purchase_result(payload)
        except ValidationError as exc:
            raise BackendError(f"{action} failed: unexpected response") from exc

    async def recover_token(self, email: str, domain: Optional[str] = None) -> RecoverResult:
        action = "Token recovery"
        body: Dict[str, Any] = {"email": email}
        if domain:
            body["domain"] = domain
        response = await self._request(action, "POST", self._url("recover"), body=body)
        return self._parse(action, RecoverResult, self._json(action, response))

    # Management operations (bearer token)

    async def get_domain_info(self, domain: str, token: str) -> DomainInfo:
        action = "Domain info"
        response = await self._request(action, "GET", self._url("manage", _encode(domain)), token=token)
        payload = self._json(action, response)
        payload.setdefault("domain", domain)
        return self._parse(action, DomainInfo, payload)

    async def list_dns_records(self, domain: str, token: str) -> DnsListResult:
        action = "List DNS records"
        response = await self._request(action, "GET", self._url("manage", _encode(domain), "dns"), token=token)
        return self._parse(action, DnsListResult, self._json(action, response))

    async def add_dns_record(self, domain: str, token: str, record: Dict[str, Any]) -> DnsRecord:
        action = "Add DNS record"
        response = await self._request(
            action, "POST", self._url("manage", _encode(domain), "dns"), token=token, body=_compact(record)
        )
        return self._parse(action, DnsRecord, self._json(action, response))

    async def update_dns_record(self, domain: str, token: str, record_id: int, updates: Dict[str, Any]) -> DnsRecord:
        action = "Update DNS record"
        response = await self._request(
            action,
            "PUT",
            self._url("manage", _encode(domain), "dns"),
            token=token,
            params={"id": record_id},
            body=_compact(updates),
        )
        return self._parse(action, DnsRecord, self._json(action, response))

    async def delete_dns_record(self, domain: str, token: str, record_id: int) -> DeleteResult:
        action = "Delete DNS record"
        await self._request(
            action, "DELETE", self._url("manage", _encode(domain), "dns"), token=token, params={"id": record_id}
        )
        return DeleteResult(record_id=record_id, success=True)

    async def get_nameservers(self, domain: str, token: str) -> NameserversResult:
        action = "Get nameservers"
        response = await self._request(
            action, "GET", self._url("manage", _encode(domain), "nameservers"), token=token
        )
        payload = self._json(action, response)
        payload.setdefault("domain", domain)
        return self._parse(action, NameserversResult, payload)

    async def set_nameservers(self, domain: str, token: str, nameservers: List[str]) -> NameserversResult:
        action = "Set nameservers"
        response = await self._request(
            action,
            "PUT",
            self._url("manage", _encode(domain), "nameservers"),
            token=token,
            body={"nameservers": list(nameservers)},
        )
        payload = self._json(action, response)
        payload.setdefault("domain", domain)
        return self._parse(action, NameserversResult, payload)

    async def get_settings(self, domain: str, token: str) -> SettingsResult:
        action = "Get settings"
        response = await self._request(action, "GET", self._url("manage", _encode(domain), "settings"), token=token)
        payload = self._json(action, response)
        payload.setdefault("domain", domain)
        return self._parse(action, SettingsResult, payload)

    async def update_settings(self, domain: str, token: str, settings: Dict[str, Any]) -> SettingsResult:
        action = "Update settings"
        response = await self._request(
            action,
            "PATCH",
            self._url("manage", _encode(domain), "settings"),
            token=token,
            body=_compact(settings),
        )
        payload = self._json(action, response)
        payload.setdefault("domain", domain)
        return self._parse(action, SettingsResult, payload)

    async def get_transfer_code(self, domain: str, token: str) -> TransferResult:
        action = "Get transfer code"
        response = await self._request(action, "GET", self._url("manage", _encode(domain), "transfer"), token=token)
        payload = self._json(action, response)
        payload.setdefault("domain", domain)
        return self._parse(action, TransferResult, payload)


def _encode(value: str) -> str:
    return quote(value, safe="")


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    # Omitted fields mean "leave unchanged" to the registrar.
    return {key: value for key, value in values.items() if value is not None}


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error:
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return None
