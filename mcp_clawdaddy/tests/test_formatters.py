from __future__ import annotations

import unittest

from mcp_clawdaddy import formatters
from mcp_clawdaddy.schemas import (
    DnsListResult,
    DnsRecord,
    DomainInfo,
    LookupResult,
    NameserversResult,
    QuoteResult,
    SettingsResult,
    TransferResult,
    parse_purchase_result,
)


class LookupFormatterTests(unittest.TestCase):
    def test_available_domain_lines(self) -> None:
        result = LookupResult.model_validate(
            {
                "fqdn": "coolstartup.com",
                "available": True,
                "status": "available",
                "price": {"amount": 12.99, "period": "year"},
                "renewal": {"amount": 19.99, "period": "year"},
            }
        )
        lines = formatters.format_lookup_result(result).splitlines()
        for expected in (
            "Domain: coolstartup.com",
            "Status: AVAILABLE",
            "Available: Yes",
            "Purchase Price: $12.99/year",
            "Renewal Price: $19.99/year",
        ):
            self.assertIn(expected, lines)

    def test_registered_domain_hides_pricing_and_shows_cache(self) -> None:
        result = LookupResult.model_validate(
            {
                "fqdn": "google.com",
                "available": False,
                "status": "registered",
                "price": {"amount": 12, "period": "year"},
                "checked_at": "2026-01-01T00:00:00Z",
                "cache": {"hit": True, "ttl_seconds": 60, "stale": False},
            }
        )
        text = formatters.format_lookup_result(result)
        self.assertNotIn("Purchase Price", text)
        self.assertIn("Checked: 2026-01-01T00:00:00Z", text)
        self.assertIn("Cache: HIT (TTL: 60s)", text)

    def test_premium_note_and_integral_prices(self) -> None:
        result = LookupResult.model_validate(
            {"fqdn": "ai.io", "available": True, "status": "available", "premium": True, "price": {"amount": 500, "period": "year"}}
        )
        text = formatters.format_lookup_result(result)
        self.assertIn("Purchase Price: $500/year", text)
        self.assertIn("Note: This is a PREMIUM domain", text)


class QuoteFormatterTests(unittest.TestCase):
    def _quote(self, margin: float) -> QuoteResult:
        return QuoteResult.model_validate(
            {
                "domain": "coolstartup.com",
                "available": True,
                "priceUsd": 12.99,
                "marginUsd": margin,
                "totalUsd": 12.99 + margin,
                "validUntil": "2026-01-01T00:15:00Z",
                "paymentMethods": {"stripe": {"enabled": True, "currency": "usd"}},
            }
        )

    def test_zero_margin_gets_launch_special(self) -> None:
        text = formatters.format_quote_result(self._quote(0))
        self.assertIn("  Service Fee: $0 (LOBSTER LAUNCH SPECIAL!)", text.splitlines())
        self.assertIn("Payment: Stripe (Credit/Debit Card)", text)
        self.assertIn("Quote valid until: 2026-01-01T00:15:00Z", text)

    def test_nonzero_margin_has_no_suffix(self) -> None:
        text = formatters.format_quote_result(self._quote(2.5))
        self.assertIn("  Service Fee: $2.5", text.splitlines())
        self.assertNotIn("LOBSTER LAUNCH SPECIAL", text)

    def test_unavailable_quote_is_short(self) -> None:
        quote = QuoteResult.model_validate({"domain": "taken.com", "available": False})
        self.assertEqual(formatters.format_quote_result(quote), "Domain: taken.com\nAvailable: No")


class PurchaseFormatterTests(unittest.TestCase):
    def test_checkout_url_takes_priority_over_success(self) -> None:
        outcome = parse_purchase_result(
            {"checkoutUrl": "https://checkout.test/s/1", "success": True, "managementToken": "clwd_x"}
        )
        text = formatters.format_purchase_result(outcome)
        self.assertTrue(text.startswith("Stripe Checkout Session Created"))
        self.assertIn("Checkout URL: https://checkout.test/s/1", text)
        self.assertNotIn("clwd_x", text)

    def test_registration_complete_with_token(self) -> None:
        outcome = parse_purchase_result(
            {
                "success": True,
                "domain": "a.io",
                "registrationId": "reg-1",
                "expiresAt": "2027-01-01",
                "nameservers": ["ns1.a.io", "ns2.a.io"],
                "managementToken": "clwd_abc",
                "manageUrl": "https://clawdaddy.app/manage/a.io",
            }
        )
        text = formatters.format_purchase_result(outcome)
        self.assertTrue(text.startswith("Domain Registered Successfully!"))
        self.assertIn("Nameservers: ns1.a.io, ns2.a.io", text)
        self.assertIn("Management Token: clwd_abc", text)

    def test_error_branch(self) -> None:
        outcome = parse_purchase_result({"error": "Domain not available"})
        self.assertEqual(formatters.format_purchase_result(outcome), "Error: Domain not available")


class DnsFormatterTests(unittest.TestCase):
    def test_empty_listing(self) -> None:
        self.assertEqual(formatters.format_dns_records(DnsListResult(records=[])), "No DNS records configured.")

    def test_root_host_renders_as_at(self) -> None:
        listing = DnsListResult.model_validate(
            {"records": [{"id": 1, "host": "", "type": "A", "answer": "123.45.67.89", "ttl": 300}]}
        )
        lines = formatters.format_dns_records(listing).splitlines()
        self.assertEqual(lines[0], "DNS Records (1):")
        self.assertIn("[1] @ A 123.45.67.89 TTL:300", lines)

    def test_order_is_preserved_and_priority_shown(self) -> None:
        listing = DnsListResult.model_validate(
            {
                "records": [
                    {"id": 9, "host": "www", "type": "CNAME", "answer": "a.io", "ttl": 300},
                    {"id": 2, "host": "@", "type": "MX", "answer": "mx.a.io", "ttl": 3600, "priority": 10},
                ]
            }
        )
        lines = formatters.format_dns_records(listing).splitlines()
        self.assertEqual(lines[2:], ["[9] www CNAME a.io TTL:300", "[2] @ MX mx.a.io TTL:3600 (priority: 10)"])

    def test_single_record_heading(self) -> None:
        record = DnsRecord.model_validate({"id": 3, "host": "api", "type": "A", "answer": "1.2.3.4", "ttl": 60})
        self.assertEqual(
            formatters.format_dns_record(record, "DNS Record Updated:"),
            "DNS Record Updated:\n[3] api A 1.2.3.4 TTL:60",
        )


class DomainFormatterTests(unittest.TestCase):
    def test_domain_info(self) -> None:
        info = DomainInfo.model_validate(
            {
                "domain": "a.io",
                "purchasedAt": "2026-01-01",
                "expiresAt": "2027-01-01",
                "nameservers": ["ns1.a.io"],
                "settings": {"locked": True, "autorenewEnabled": False, "privacyEnabled": True},
            }
        )
        text = formatters.format_domain_info(info)
        self.assertIn("  - ns1.a.io", text)
        self.assertIn("  Locked: Yes", text)
        self.assertIn("  Auto-Renew: Disabled", text)
        self.assertIn("  Privacy: Enabled", text)

    def test_nameservers_with_heading(self) -> None:
        result = NameserversResult(domain="a.io", nameservers=["ns1.cloudflare.com", "ns2.cloudflare.com"])
        text = formatters.format_nameservers(result, heading="Nameservers updated!")
        self.assertTrue(text.startswith("Nameservers updated!\n\nNameservers for a.io:"))
        self.assertTrue(text.endswith("  - ns1.cloudflare.com\n  - ns2.cloudflare.com"))

    def test_settings(self) -> None:
        result = SettingsResult.model_validate({"domain": "a.io", "locked": False, "autorenewEnabled": True})
        self.assertEqual(
            formatters.format_settings(result),
            "Settings for a.io:\n  Locked: No\n  Auto-Renew: Enabled\n  Privacy: Disabled",
        )

    def test_transfer_when_locked(self) -> None:
        result = TransferResult.model_validate(
            {"domain": "a.io", "authCode": "AUTH-123", "locked": True, "message": "Unlock the domain first."}
        )
        text = formatters.format_transfer(result)
        self.assertIn("Auth Code: AUTH-123", text)
        self.assertIn("Domain Locked: Yes (must unlock to transfer)", text)
        self.assertTrue(text.endswith("Unlock the domain first."))


if __name__ == "__main__":
    unittest.main()
