"""Email syntax check and MX-record deliverability lookup."""

from __future__ import annotations

import re

import dns.asyncresolver
import dns.exception
import structlog

logger = structlog.get_logger()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email_syntax(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def email_domain(email: str) -> str:
    return email.rsplit("@", 1)[-1]


class MxResolver:
    """Looks up MX records for a domain through dnspython's async resolver."""

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    async def has_mx(self, domain: str) -> bool:
        """True when the domain publishes at least one MX record.

        NXDOMAIN, no answer, timeouts and any other resolver error all count
        as "no MX".
        """
        try:
            answer = await dns.asyncresolver.resolve(domain, "MX", lifetime=self.timeout)
        except dns.exception.DNSException as exc:
            logger.info("mx_lookup_failed", domain=domain, error=type(exc).__name__)
            return False
        return len(answer) > 0


class StaticMxResolver(MxResolver):
    """Answers from a fixed set of domains. Used when MX checks are disabled."""

    def __init__(self, domains: set[str] | None = None, *, accept_all: bool = False) -> None:
        super().__init__()
        self.domains = {d.lower() for d in domains or set()}
        self.accept_all = accept_all

    async def has_mx(self, domain: str) -> bool:
        return self.accept_all or domain.lower() in self.domains
