"""
CloudFront distribution composed from an ordered list of overlays.

Each overlay declares the property keys it may set and a predicate saying
when it applies. Overlays are applied in OVERLAYS order onto an empty,
read-only record; an overlay that sets a key another overlay already set, or
a key it did not declare, raises OverlayConflictError. Nothing is overwritten
silently.

The certificate and access-policy overlays are independent (either, both or
neither may apply), so their key sets must be disjoint; check_disjoint_overlays
asserts that. The default-certificate overlay shares ``viewer_certificate``
with the certificate overlay but the two predicates are mutually exclusive.
"""

from dataclasses import dataclass
from itertools import combinations
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

import pulumi

from sitecdn.access_policy import AccessPolicy
from sitecdn.config import SiteConfig
from sitecdn.errors import GraphError, OverlayConflictError
from sitecdn.graph import DISTRIBUTION, Concat, ResourceGraph, ResourceNode
from sitecdn.origin import Origin
from sitecdn.outputs import StackOutput

ORIGIN_ID = "webBucketOrigin"
DEFAULT_ROOT_OBJECT = "index.html"
# Pinned minimum TLS version for viewers on the custom domain.
SECURITY_POLICY = "TLSv1.2_2019"


@dataclass(frozen=True)
class DistributionInputs:
    """Upstream nodes the overlays may reference."""

    origin: Origin
    certificate: ResourceNode | None = None
    access_policy: AccessPolicy | None = None


@dataclass(frozen=True)
class Overlay:
    name: str
    keys: frozenset[str]
    applies: Callable[[SiteConfig], bool]
    build: Callable[[SiteConfig, DistributionInputs], dict[str, Any]]


def _base(config: SiteConfig, inputs: DistributionInputs) -> dict[str, Any]:
    origin = inputs.origin
    return {
        "enabled": True,
        "comment": f"{config.svc_name} static site",
        "default_root_object": DEFAULT_ROOT_OBJECT,
        "origins": [
            {
                "origin_id": ORIGIN_ID,
                "domain_name": origin.bucket.ref("bucket_regional_domain_name"),
                "s3_origin_config": {
                    "origin_access_identity": origin.identity.ref("cloudfront_access_identity_path"),
                },
            }
        ],
        # Default behavior only; no custom path patterns.
        "default_cache_behavior": {
            "target_origin_id": ORIGIN_ID,
            "viewer_protocol_policy": "redirect-to-https",
            "allowed_methods": ["GET", "HEAD"],
            "cached_methods": ["GET", "HEAD"],
            "compress": True,
            "forwarded_values": {
                "query_string": False,
                "cookies": {"forward": "none"},
            },
        },
        "restrictions": {"geo_restriction": {"restriction_type": "none"}},
        "price_class": "PriceClass_100",
    }


def _certificate(config: SiteConfig, inputs: DistributionInputs) -> dict[str, Any]:
    if inputs.certificate is None:
        raise GraphError("certificate overlay applied without a certificate")
    return {
        "viewer_certificate": {
            "acm_certificate_arn": inputs.certificate.ref("arn"),
            "ssl_support_method": "sni-only",
            "minimum_protocol_version": SECURITY_POLICY,
        },
        "aliases": [config.site_domain],
    }


def _default_certificate(config: SiteConfig, inputs: DistributionInputs) -> dict[str, Any]:
    return {"viewer_certificate": {"cloudfront_default_certificate": True}}


def _access_policy(config: SiteConfig, inputs: DistributionInputs) -> dict[str, Any]:
    if inputs.access_policy is None:
        raise GraphError("access-policy overlay applied without an access policy")
    # CloudFront takes the WAFv2 ACL ARN, not its id.
    return {"web_acl_id": inputs.access_policy.web_acl.ref("arn")}


BASE_OVERLAY = Overlay(
    name="base",
    keys=frozenset(
        {
            "enabled",
            "comment",
            "default_root_object",
            "origins",
            "default_cache_behavior",
            "restrictions",
            "price_class",
        }
    ),
    applies=lambda config: True,
    build=_base,
)

CERTIFICATE_OVERLAY = Overlay(
    name="certificate",
    keys=frozenset({"viewer_certificate", "aliases"}),
    applies=lambda config: config.use_custom_domain,
    build=_certificate,
)

DEFAULT_CERTIFICATE_OVERLAY = Overlay(
    name="default-certificate",
    keys=frozenset({"viewer_certificate"}),
    applies=lambda config: not config.use_custom_domain,
    build=_default_certificate,
)

ACCESS_POLICY_OVERLAY = Overlay(
    name="access-policy",
    keys=frozenset({"web_acl_id"}),
    applies=lambda config: config.create_waf_acl,
    build=_access_policy,
)

OVERLAYS: tuple[Overlay, ...] = (
    BASE_OVERLAY,
    CERTIFICATE_OVERLAY,
    DEFAULT_CERTIFICATE_OVERLAY,
    ACCESS_POLICY_OVERLAY,
)

# Overlays whose predicates are independent of each other.
INDEPENDENT_OVERLAYS: tuple[Overlay, ...] = (
    BASE_OVERLAY,
    CERTIFICATE_OVERLAY,
    ACCESS_POLICY_OVERLAY,
)


def check_disjoint_overlays(overlays: Iterable[Overlay] = INDEPENDENT_OVERLAYS) -> None:
    """Raise OverlayConflictError if any two overlays declare a shared key."""
    for first, second in combinations(overlays, 2):
        shared = first.keys & second.keys
        if shared:
            raise OverlayConflictError(
                f"Overlays '{first.name}' and '{second.name}' both declare {sorted(shared)}"
            )


def apply_overlays(
    config: SiteConfig,
    inputs: DistributionInputs,
    overlays: Iterable[Overlay] = OVERLAYS,
) -> tuple[Mapping[str, Any], list[str]]:
    """
    Apply overlays in order and return (properties, names of applied overlays).
    """
    properties: Mapping[str, Any] = MappingProxyType({})
    applied: list[str] = []
    for overlay in overlays:
        if not overlay.applies(config):
            continue
        values = overlay.build(config, inputs)

        undeclared = set(values) - overlay.keys
        if undeclared:
            raise OverlayConflictError(
                f"Overlay '{overlay.name}' set undeclared keys {sorted(undeclared)}"
            )
        clobbered = set(values) & set(properties)
        if clobbered:
            raise OverlayConflictError(
                f"Overlay '{overlay.name}' would overwrite {sorted(clobbered)}"
            )

        properties = MappingProxyType({**properties, **values})
        applied.append(overlay.name)
    return properties, applied


def compose_distribution(
    config: SiteConfig,
    graph: ResourceGraph,
    inputs: DistributionInputs,
) -> ResourceNode:
    """
    Add the distribution node and emit the ``defaultUrl`` output.
    """
    check_disjoint_overlays()
    properties, applied = apply_overlays(config, inputs)
    distribution = graph.add(ResourceNode("webDemoDist", DISTRIBUTION, properties))

    graph.emit(
        StackOutput(
            name="defaultUrl",
            description="Web Demo CloudFront URL",
            value=Concat(("https://", distribution.ref("domain_name"))),
        )
    )
    pulumi.log.info(f"distribution: overlays {', '.join(applied)}")
    return distribution
