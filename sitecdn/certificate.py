"""
Viewer certificate resolution.

Exactly one strategy applies per build, chosen from the flags alone:

- SKIP: no custom domain; CloudFront serves its default certificate.
- CREATE: request a wildcard ``*.<root_domain>`` certificate with DNS
  validation. The validation CNAME is published out of band; the build does
  not wait for the certificate to be issued.
- REFERENCE: wrap the configured certificate ARN. Nothing is created.
"""

import enum

import pulumi

from sitecdn._helpers import wildcard_domain
from sitecdn.config import SiteConfig
from sitecdn.graph import CERTIFICATE, EXISTING_CERTIFICATE, ResourceGraph, ResourceNode


class CertificateStrategy(enum.Enum):
    SKIP = "skip"
    CREATE = "create"
    REFERENCE = "reference"


def select_strategy(config: SiteConfig) -> CertificateStrategy:
    if not config.use_custom_domain:
        return CertificateStrategy.SKIP
    if config.create_cert:
        return CertificateStrategy.CREATE
    return CertificateStrategy.REFERENCE


def resolve_certificate(config: SiteConfig, graph: ResourceGraph) -> ResourceNode | None:
    """
    Add the certificate node chosen by select_strategy and return it.

    Returns None for SKIP. Both other strategies return a node exposing an
    ``arn`` attribute for the distribution's viewer certificate.
    """
    strategy = select_strategy(config)

    if strategy is CertificateStrategy.SKIP:
        pulumi.log.info("certificate: skipped, using the CloudFront default certificate")
        return None

    if strategy is CertificateStrategy.CREATE:
        domain_name = wildcard_domain(config.root_domain)
        pulumi.log.info(f"certificate: create {domain_name} with DNS validation")
        return graph.add(
            ResourceNode(
                "cfCert",
                CERTIFICATE,
                {"domain_name": domain_name, "validation_method": "DNS"},
            )
        )

    pulumi.log.info(f"certificate: reference {config.cert_arn}")
    return graph.add(
        ResourceNode(
            "rootCfCertificate",
            EXISTING_CERTIFICATE,
            {"arn": config.cert_arn},
        )
    )
