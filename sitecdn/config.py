"""
Site configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings. All settings are read from
Pulumi config (e.g. Pulumi.<stack>.yaml or pulumi config set) under the keys
listed in _CONFIG_SPEC. Only svcName is required; feature flags default to
false. The record is passed explicitly to every build stage and never mutated.
"""

import os
from dataclasses import dataclass
from typing import Any, Callable

import pulumi


def _require_str(config: pulumi.Config, key: str) -> str:
    return config.require(key)


def _get_str(config: pulumi.Config, key: str) -> str:
    return config.get(key) or ""


def _get_optional_str(config: pulumi.Config, key: str) -> str | None:
    return config.get(key) or None


def _get_bool(config: pulumi.Config, key: str) -> bool:
    raw = config.get(key)
    if raw is None:
        return False
    return str(raw).strip().lower() in ("1", "true", "yes")


def _get_cidrs(config: pulumi.Config, key: str) -> Any:
    raw = config.get_object(key)
    if raw is None:
        return ()
    # Anything other than a list is passed through for the validator to reject.
    return tuple(raw) if isinstance(raw, list) else raw


def _get_region(config: pulumi.Config, key: str) -> str:
    return (
        config.get(key)
        or pulumi.Config("aws").get("region")
        or os.environ.get("AWS_REGION")
        or os.environ.get("AWS_DEFAULT_REGION")
        or ""
    )


# (field, key, parser); parser receives (config, key) and returns value.
_CONFIG_SPEC: list[tuple[str, str, Callable[[pulumi.Config, str], Any]]] = [
    ("svc_name", "svcName", _require_str),
    ("use_custom_domain", "useCustomDomain", _get_bool),
    ("create_cert", "createCert", _get_bool),
    ("cert_arn", "certArn", _get_str),
    ("root_domain", "rootDomain", _get_str),
    ("hostname", "hostname", _get_str),
    ("create_waf_acl", "createWafAcl", _get_bool),
    ("allow_cidrs", "allowCidrs", _get_cidrs),
    ("create_dns", "createDns", _get_bool),
    ("region", "region", _get_region),
    ("account", "account", _get_optional_str),
    ("assets_path", "assetsPath", _get_optional_str),
]


@dataclass(frozen=True)
class SiteConfig:
    """
    Site configuration from Pulumi config.

    Attributes:
        svc_name: Service name; applied as the ``Service`` tag (required).
        use_custom_domain: Serve the site on ``<hostname>.<root_domain>``.
        create_cert: Create a wildcard ACM certificate instead of using cert_arn.
        cert_arn: ARN of an existing us-east-1 certificate.
        root_domain: Domain for the certificate, aliases and hosted zone.
        hostname: Leading label of the custom site domain.
        create_waf_acl: Restrict access to allow_cidrs with a WAF web ACL.
        allow_cidrs: IPv4 CIDRs allowed through the ACL, in order.
        create_dns: Create the Route 53 alias for the custom domain.
        region: Deployment region.
        account: Optional AWS account id the provider is pinned to.
        assets_path: Optional local folder synced to the site bucket.
    """

    svc_name: str
    use_custom_domain: bool = False
    create_cert: bool = False
    cert_arn: str = ""
    root_domain: str = ""
    hostname: str = ""
    create_waf_acl: bool = False
    allow_cidrs: tuple[str, ...] = ()
    create_dns: bool = False
    region: str = ""
    account: str | None = None
    assets_path: str | None = None

    @property
    def site_domain(self) -> str:
        return f"{self.hostname}.{self.root_domain}"

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config) -> "SiteConfig":
        """
        Build SiteConfig from pulumi.Config(). Keys are the camelCase names in
        _CONFIG_SPEC.
        """
        kwargs = {field: parser(config, key) for field, key, parser in _CONFIG_SPEC}
        return cls(**kwargs)
