"""
Static site behind CloudFront, composed from feature flags.

The pure core turns a SiteConfig into a ResourceGraph without touching the
Pulumi engine, so every stage can be unit-tested on its own:

- **validate**: cross-field preconditions, raised before any node exists.
- **resolve_certificate**: skip, create or reference the viewer certificate.
- **build_access_policy**: WAF IP set → rule group → web ACL.
- **compose_distribution**: CloudFront distribution from ordered overlays.
- **bind_dns_alias**: Route 53 alias for the custom domain.
- **build_site**: all stages in order.

The AWS side applies the graph:

- **PulumiBackend** / **StaticSite**: one pulumi_aws resource per node.
- **route53_zone_lookup**: hosted zone lookup for the DNS stage.
- **AssetSync**: uploads site assets and builds the cache invalidation command.
"""

from sitecdn.assets import AssetSync
from sitecdn.aws import PulumiBackend, StaticSite, route53_zone_lookup
from sitecdn.builder import build_site
from sitecdn.config import SiteConfig
from sitecdn.errors import SiteBuildError

__all__ = [
    "AssetSync",
    "PulumiBackend",
    "SiteBuildError",
    "SiteConfig",
    "StaticSite",
    "build_site",
    "route53_zone_lookup",
]
