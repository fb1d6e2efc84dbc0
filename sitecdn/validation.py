"""
Cross-field preconditions on the site configuration.

Rules are checked in a fixed precedence order and the first violation is
raised. Validation has no side effects and finishes before any resource node
is created.
"""

import pulumi

from sitecdn._helpers import is_cidr_list
from sitecdn.config import SiteConfig
from sitecdn.errors import (
    AccessPolicyRegionMismatch,
    CertificateRegionMismatch,
    EmptyAllowList,
    UseCustomDomainRequiresCertificate,
)

# CloudFront only accepts certificates and web ACLs created in this region.
CLOUDFRONT_REGION = "us-east-1"


def validate(config: SiteConfig) -> SiteConfig:
    """
    Return config unchanged if every rule holds.

    Raises:
        UseCustomDomainRequiresCertificate: custom domain without createCert
            or certArn.
        CertificateRegionMismatch: createCert outside us-east-1.
        EmptyAllowList: createWafAcl without a non-empty list of CIDRs.
        AccessPolicyRegionMismatch: createWafAcl outside us-east-1.
    """
    if config.use_custom_domain and not config.create_cert and not config.cert_arn:
        raise UseCustomDomainRequiresCertificate(
            "Using a custom domain requires either createCert or an existing certificate ARN"
        )

    if config.use_custom_domain and config.create_cert and config.region != CLOUDFRONT_REGION:
        raise CertificateRegionMismatch(
            f"Stack must be deployed in {CLOUDFRONT_REGION} to create a new certificate "
            f"(region is '{config.region}')"
        )

    if config.create_waf_acl and not is_cidr_list(config.allow_cidrs):
        raise EmptyAllowList("createWafAcl expects a non-empty list of CIDR addresses in allowCidrs")

    if config.create_waf_acl and config.region != CLOUDFRONT_REGION:
        raise AccessPolicyRegionMismatch(
            f"Stack must be deployed in {CLOUDFRONT_REGION} to create the WAF ACL "
            f"(region is '{config.region}')"
        )

    pulumi.log.info(f"config: valid for service '{config.svc_name}' in '{config.region}'")
    return config
