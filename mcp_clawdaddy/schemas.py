from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DNS_RECORD_TYPES = ("A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV")


class RegistrarModel(BaseModel):
    """Base for payloads returned by the registrar API (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class Price(RegistrarModel):
    amount: float
    currency: str = "USD"
    period: str = "year"


class CacheInfo(RegistrarModel):
    hit: bool = False
    ttl_seconds: int = 0
    stale: bool = False


class LookupResult(RegistrarModel):
    fqdn: str
    available: bool
    status: str = "unknown"
    premium: bool = False
    price: Optional[Price] = None
    renewal: Optional[Price] = None
    checked_at: Optional[str] = None
    source: Optional[str] = None
    cache: Optional[CacheInfo] = None


class PaymentMethod(RegistrarModel):
    enabled: bool = False
    currency: Optional[str] = None
    endpoint: Optional[str] = None


class QuoteResult(RegistrarModel):
    domain: str
    available: bool
    price_usd: Optional[float] = Field(None, alias="priceUsd")
    margin_usd: Optional[float] = Field(None, alias="marginUsd")
    total_usd: Optional[float] = Field(None, alias="totalUsd")
    premium: bool = False
    currency: Optional[str] = None
    valid_until: Optional[str] = Field(None, alias="validUntil")
    payment_methods: Dict[str, PaymentMethod] = Field(default_factory=dict, alias="paymentMethods")


class CheckoutPending(RegistrarModel):
    kind: Literal["checkout_pending"] = "checkout_pending"
    method: Optional[str] = None
    checkout_url: str = Field(..., alias="checkoutUrl")
    session_id: Optional[str] = Field(None, alias="sessionId")
    quote: Optional[QuoteResult] = None


class RegistrationComplete(RegistrarModel):
    kind: Literal["registration_complete"] = "registration_complete"
    domain: Optional[str] = None
    registration_id: Optional[str] = Field(None, alias="registrationId")
    expires_at: Optional[str] = Field(None, alias="expiresAt")
    nameservers: List[str] = Field(default_factory=list)
    management_token: Optional[str] = Field(None, alias="managementToken")
    manage_url: Optional[str] = Field(None, alias="manageUrl")
    message: Optional[str] = None


class PurchaseError(RegistrarModel):
    kind: Literal["purchase_error"] = "purchase_error"
    error: str


PurchaseOutcome = Union[CheckoutPending, RegistrationComplete, PurchaseError]


def parse_purchase_result(payload: Dict[str, Any]) -> PurchaseOutcome:
    """Pick the purchase variant from the fields the registrar populated.

    A checkout URL wins over a success flag when both are present.
    """

    if payload.get("checkoutUrl"):
        return CheckoutPending.model_validate(payload)
    if payload.get("success"):
        return RegistrationComplete.model_validate(payload)
    message = payload.get("error") or payload.get("message")
    if not message:
        message = json.dumps(payload, separators=(",", ":"), sort_keys=True)
    return PurchaseError(error=str(message))


class DomainSettings(RegistrarModel):
    locked: bool = False
    autorenew_enabled: bool = Field(False, alias="autorenewEnabled")
    privacy_enabled: bool = Field(False, alias="privacyEnabled")


class ManagementLinks(RegistrarModel):
    dns: Optional[str] = None
    nameservers: Optional[str] = None
    settings: Optional[str] = None
    transfer: Optional[str] = None


class DomainInfo(RegistrarModel):
    domain: str
    purchased_at: Optional[str] = Field(None, alias="purchasedAt")
    expires_at: Optional[str] = Field(None, alias="expiresAt")
    nameservers: List[str] = Field(default_factory=list)
    settings: DomainSettings = Field(default_factory=DomainSettings)
    management: Optional[ManagementLinks] = None


class DnsRecord(RegistrarModel):
    id: int
    domain_name: Optional[str] = Field(None, alias="domainName")
    host: str = ""
    fqdn: Optional[str] = None
    type: str
    answer: str
    ttl: int
    priority: Optional[int] = None


class DnsListResult(RegistrarModel):
    records: List[DnsRecord] = Field(default_factory=list)


class NameserversResult(RegistrarModel):
    domain: str
    nameservers: List[str] = Field(default_factory=list)


class SettingsResult(RegistrarModel):
    domain: str
    locked: bool = False
    autorenew_enabled: bool = Field(False, alias="autorenewEnabled")
    privacy_enabled: bool = Field(False, alias="privacyEnabled")


class TransferResult(RegistrarModel):
    domain: str
    auth_code: str = Field(..., alias="authCode")
    locked: bool = False
    message: str = ""


class RecoverResult(RegistrarModel):
    success: bool = False
    message: str = ""


class DeleteResult(BaseModel):
    record_id: int
    success: bool = True


class ToolResponse(BaseModel):
    text: str
    is_error: bool = False


class InvokeRequest(BaseModel):
    tool: str = Field(..., description="Tool name exposed via MCP")
    arguments: Dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str
    detail: Optional[str] = None
