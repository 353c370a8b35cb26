"""URL validation before any network call."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass
class UrlValidationResult:
    """Result of URL validation."""

    is_valid: bool
    rejection_reason: str | None = None

    @staticmethod
    def valid() -> UrlValidationResult:
        """Create a valid result."""
        return UrlValidationResult(is_valid=True)

    @staticmethod
    def invalid(reason: str) -> UrlValidationResult:
        """Create an invalid result with reason."""
        return UrlValidationResult(is_valid=False, rejection_reason=reason)


class UrlValidator:
    """
    Validates article URLs.

    Rejects anything that is not an absolute http(s) URL with a host. With
    ``block_private_ips`` it also refuses local targets, so a public
    deployment cannot be used to probe the network it runs in:
    - Private, loopback, link-local and reserved IP addresses
    - Localhost and internal domain suffixes

    Example:
        validator = UrlValidator(block_private_ips=True)
        result = validator.validate("http://127.0.0.1/admin")
        if not result.is_valid:
            print(f"Rejected: {result.rejection_reason}")
    """

    DEFAULT_ALLOWED_SCHEMES = frozenset({"http", "https"})
    INTERNAL_SUFFIXES = (".internal", ".local", ".localhost", ".localdomain")
    LOCALHOST_NAMES = frozenset({"localhost", "localhost.localdomain"})

    def __init__(
        self,
        allowed_schemes: frozenset[str] | set[str] | None = None,
        block_private_ips: bool = False,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the URL validator.

        Args:
            allowed_schemes: Set of allowed URL schemes (default: http and https)
            block_private_ips: Whether to block private/internal targets
            logger: Optional logger for validation messages
        """
        self.allowed_schemes = allowed_schemes or self.DEFAULT_ALLOWED_SCHEMES
        self.block_private_ips = block_private_ips
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, url: str) -> UrlValidationResult:
        """
        Validate a URL.

        Args:
            url: The URL to validate

        Returns:
            UrlValidationResult with is_valid and optional rejection_reason
        """
        if not url or not url.strip():
            return UrlValidationResult.invalid("URL is required")

        try:
            parsed = urlparse(url.strip())
            hostname = parsed.hostname
        except ValueError:
            return UrlValidationResult.invalid("Invalid URL format")

        if parsed.scheme.lower() not in self.allowed_schemes:
            return UrlValidationResult.invalid(f"Invalid URL: scheme '{parsed.scheme}' not allowed")

        if not hostname:
            return UrlValidationResult.invalid("Invalid URL: no host")

        if self.block_private_ips:
            blocked = self._check_local_target(hostname.lower())
            if blocked is not None:
                self.logger.warning(f"Rejected {url}: {blocked.rejection_reason}")
                return blocked

        return UrlValidationResult.valid()

    def _check_local_target(self, hostname: str) -> UrlValidationResult | None:
        if hostname in self.LOCALHOST_NAMES:
            return UrlValidationResult.invalid("Localhost URLs not allowed")

        for suffix in self.INTERNAL_SUFFIXES:
            if hostname.endswith(suffix):
                return UrlValidationResult.invalid(f"Internal domain suffix '{suffix}' not allowed")

        return self._check_ip_address(hostname)

    def _check_ip_address(self, hostname: str) -> UrlValidationResult | None:
        """
        Check if hostname is a private/internal IP address.

        Args:
            hostname: The hostname to check

        Returns:
            UrlValidationResult if IP is blocked, None if hostname is not an IP
        """
        try:
            ip = ipaddress.ip_address(hostname)
        except ValueError:
            # A domain name, not an address
            return None

        if ip.is_loopback:
            return UrlValidationResult.invalid(f"Loopback IP address '{hostname}' not allowed")
        if ip.is_private:
            return UrlValidationResult.invalid(f"Private IP address '{hostname}' not allowed")
        if ip.is_link_local:
            return UrlValidationResult.invalid(f"Link-local IP address '{hostname}' not allowed")
        if ip.is_reserved:
            return UrlValidationResult.invalid(f"Reserved IP address '{hostname}' not allowed")
        if isinstance(ip, ipaddress.IPv6Address) and ip.is_site_local:
            return UrlValidationResult.invalid(f"Site-local IPv6 address '{hostname}' not allowed")

        return None

    def is_valid(self, url: str) -> bool:
        """Quick check if URL is valid."""
        return self.validate(url).is_valid
