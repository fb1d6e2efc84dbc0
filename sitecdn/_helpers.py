"""
Pure helpers for domain names, URLs and allow lists. Testable without Pulumi
runtime.

Used by the certificate stage (wildcard_domain), the distribution and DNS
stages (fqdn, https_url), the validator (is_cidr_list) and asset sync
(invalidation_command). No Pulumi types; all functions accept and return plain
Python types.
"""

from typing import Any, Iterable


def strip_trailing_dot(
    domain: str,
) -> str:
    """
    Return domain without a trailing dot.

    ACM and CloudFront aliases reject the fully qualified form that Route 53
    returns for zone names. Idempotent if no dot is present.
    """
    return domain[:-1] if domain.endswith(".") else domain


def fqdn(
    domain: str,
    hostname: str,
) -> str:
    """
    Build a host name like 'www.example.com' from domain and hostname.

    Args:
        domain: Root domain (e.g. "example.com"); a trailing dot is dropped.
        hostname: Leading label (e.g. "www").

    Returns:
        Host name without trailing dot (e.g. "www.example.com").
    """
    return f"{hostname}.{strip_trailing_dot(domain)}"


def wildcard_domain(
    domain: str,
) -> str:
    """Return the wildcard certificate pattern for domain (``*.example.com``)."""
    return f"*.{strip_trailing_dot(domain)}"


def https_url(
    host: str,
) -> str:
    return f"https://{host}"


def is_cidr_list(
    value: Any,
) -> bool:
    """
    True if value is a non-empty list or tuple of strings.

    A bare string is a sequence too, but never a valid allow list.
    """
    if not isinstance(value, (list, tuple)) or not value:
        return False
    return all(isinstance(cidr, str) for cidr in value)


def invalidation_command(
    distribution_id: str,
    paths: Iterable[str] = ("/*",),
) -> str:
    """
    Build the AWS CLI command that invalidates paths on a distribution.

    Paths are quoted so wildcards are not expanded by the shell.
    """
    quoted = " ".join(f"'{path}'" for path in paths)
    return f"aws cloudfront create-invalidation --distribution-id {distribution_id} --paths {quoted}"
