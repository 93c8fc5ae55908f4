"""Text renderings of registrar results.

Values are echoed as the registrar sent them; nothing is recomputed here.
"""

from __future__ import annotations

from typing import List, Optional, Union

from .schemas import (
    CheckoutPending,
    DeleteResult,
    DnsListResult,
    DnsRecord,
    DomainInfo,
    LookupResult,
    NameserversResult,
    PurchaseError,
    PurchaseOutcome,
    QuoteResult,
    RecoverResult,
    RegistrationComplete,
    SettingsResult,
    TransferResult,
)

LAUNCH_SPECIAL_SUFFIX = " (LOBSTER LAUNCH SPECIAL!)"
EMPTY_DNS_MESSAGE = "No DNS records configured."

_PAYMENT_LABELS = {"stripe": "Stripe (Credit/Debit Card)"}


def format_number(value: Union[int, float, None]) -> str:
    """Render a JSON number the way it was sent (``12`` rather than ``12.0``)."""

    if value is None:
        return "n/a"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _enabled(flag: bool) -> str:
    return "Enabled" if flag else "Disabled"


def format_lookup_result(result: LookupResult) -> str:
    lines: List[str] = [
        f"Domain: {result.fqdn}",
        f"Status: {result.status.upper()}",
        f"Available: {_yes_no(result.available)}",
    ]

    if result.available and result.price:
        lines.append(f"Purchase Price: ${format_number(result.price.amount)}/{result.price.period}")
        if result.renewal:
            lines.append(f"Renewal Price: ${format_number(result.renewal.amount)}/{result.renewal.period}")
        if result.premium:
            lines.append("Note: This is a PREMIUM domain")

    if result.checked_at or result.cache:
        lines.append("")
    if result.checked_at:
        lines.append(f"Checked: {result.checked_at}")
    if result.cache:
        stale = ", stale" if result.cache.stale else ""
        lines.append(f"Cache: {'HIT' if result.cache.hit else 'MISS'} (TTL: {result.cache.ttl_seconds}s{stale})")

    return "\n".join(lines)


def _payment_line(result: QuoteResult) -> str:
    enabled = [name for name, method in result.payment_methods.items() if method.enabled]
    if not enabled:
        enabled = ["stripe"]
    return "Payment: " + ", ".join(_PAYMENT_LABELS.get(name.lower(), name) for name in enabled)


def format_quote_result(result: QuoteResult) -> str:
    lines: List[str] = [f"Domain: {result.domain}", f"Available: {_yes_no(result.available)}"]

    if result.available:
        lines.extend(["", "Pricing:"])
        if result.price_usd is not None:
            lines.append(f"  Base Price: ${format_number(result.price_usd)}")
        if result.margin_usd is not None:
            suffix = LAUNCH_SPECIAL_SUFFIX if result.margin_usd == 0 else ""
            lines.append(f"  Service Fee: ${format_number(result.margin_usd)}{suffix}")
        if result.total_usd is not None:
            lines.append(f"  Total: ${format_number(result.total_usd)}")
        if result.premium:
            lines.append("  Note: Premium domain")

        lines.extend(["", _payment_line(result)])
        if result.valid_until:
            lines.extend(["", f"Quote valid until: {result.valid_until}"])

    return "\n".join(lines)


def _format_checkout(result: CheckoutPending) -> str:
    return "\n".join(
        [
            "Stripe Checkout Session Created",
            "",
            f"Checkout URL: {result.checkout_url}",
            "",
            "** ACTION REQUIRED: Have your human open the checkout URL to complete payment with their credit card. **",
            "",
            "After payment:",
            "1. The management token will be shown on the success page",
            "2. A confirmation email will be sent with the token",
            "3. Save the token to manage DNS, nameservers, and settings",
        ]
    )


def _format_registration(result: RegistrationComplete) -> str:
    lines: List[str] = [
        "Domain Registered Successfully!",
        "",
        f"Domain: {result.domain}",
        f"Registration ID: {result.registration_id}",
        f"Expires: {result.expires_at}",
    ]
    if result.nameservers:
        lines.append(f"Nameservers: {', '.join(result.nameservers)}")
    if result.management_token:
        lines.extend(
            [
                "",
                "*** IMPORTANT - SAVE THIS TOKEN ***",
                f"Management Token: {result.management_token}",
                f"Manage URL: {result.manage_url}",
                "",
                "You need this token to manage DNS, nameservers, and settings.",
                "Store it securely - it cannot be retrieved without recovery.",
            ]
        )
    return "\n".join(lines)


def format_purchase_result(result: PurchaseOutcome) -> str:
    if isinstance(result, CheckoutPending):
        return _format_checkout(result)
    if isinstance(result, RegistrationComplete):
        return _format_registration(result)
    if isinstance(result, PurchaseError):
        return f"Error: {result.error}"
    raise TypeError(f"Unsupported purchase result {type(result).__name__}")


def format_domain_info(result: DomainInfo) -> str:
    lines: List[str] = [
        f"Domain: {result.domain}",
        f"Purchased: {result.purchased_at}",
        f"Expires: {result.expires_at}",
        "",
        "Nameservers:",
    ]
    lines.extend(f"  - {ns}" for ns in result.nameservers)
    lines.extend(
        [
            "",
            "Settings:",
            f"  Locked: {_yes_no(result.settings.locked)}",
            f"  Auto-Renew: {_enabled(result.settings.autorenew_enabled)}",
            f"  Privacy: {_enabled(result.settings.privacy_enabled)}",
        ]
    )
    return "\n".join(lines)


def format_dns_record_line(record: DnsRecord) -> str:
    priority = f" (priority: {record.priority})" if record.priority else ""
    return f"[{record.id}] {record.host or '@'} {record.type} {record.answer} TTL:{record.ttl}{priority}"


def format_dns_records(result: DnsListResult) -> str:
    if not result.records:
        return EMPTY_DNS_MESSAGE
    lines = [f"DNS Records ({len(result.records)}):", ""]
    lines.extend(format_dns_record_line(record) for record in result.records)
    return "\n".join(lines)


def format_dns_record(record: DnsRecord, heading: str = "DNS Record Created:") -> str:
    return f"{heading}\n{format_dns_record_line(record)}"


def format_dns_delete(result: DeleteResult) -> str:
    return f"DNS record {result.record_id} deleted successfully."


def format_nameservers(result: NameserversResult, heading: Optional[str] = None) -> str:
    lines: List[str] = []
    if heading:
        lines.extend([heading, ""])
    lines.extend([f"Nameservers for {result.domain}:", ""])
    lines.extend(f"  - {ns}" for ns in result.nameservers)
    return "\n".join(lines)


def format_settings(result: SettingsResult, heading: Optional[str] = None) -> str:
    lines: List[str] = []
    if heading:
        lines.extend([heading, ""])
    lines.extend(
        [
            f"Settings for {result.domain}:",
            f"  Locked: {_yes_no(result.locked)}",
            f"  Auto-Renew: {_enabled(result.autorenew_enabled)}",
            f"  Privacy: {_enabled(result.privacy_enabled)}",
        ]
    )
    return "\n".join(lines)


def format_transfer(result: TransferResult) -> str:
    locked = "Yes (must unlock to transfer)" if result.locked else "No"
    lines = [
        f"Transfer Code for {result.domain}",
        "",
        f"Auth Code: {result.auth_code}",
        f"Domain Locked: {locked}",
    ]
    if result.message:
        lines.extend(["", result.message])
    return "\n".join(lines)


def format_recover_result(result: RecoverResult) -> str:
    return f"{result.message}\n\nNote: If a new token is generated, your old token will be invalidated."


def format_error(message: str) -> str:
    return f"Error: {message}"
