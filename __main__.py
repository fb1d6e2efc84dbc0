"""
Static site on S3 + CloudFront - IaC entrypoint.

Reads the site configuration from Pulumi config, builds the resource graph and
applies it through the Pulumi backend:

- **Origin**: private S3 bucket read by CloudFront through an Origin Access
  Identity.
- **Certificate** (useCustomDomain): new wildcard ACM certificate
  (createCert) or an existing one (certArn).
- **WAF** (createWafAcl): web ACL allowing only allowCidrs.
- **DNS** (useCustomDomain + createDns): Route 53 alias for
  <hostname>.<rootDomain>.
- **Assets** (assetsPath): folder synced to the bucket.

Stack exports: defaultUrl, accessPolicyId, customUrl (as enabled), and
cacheInvalidationCommand when assets are synced.
"""

import pulumi

from sitecdn import (
    AssetSync,
    PulumiBackend,
    SiteBuildError,
    SiteConfig,
    build_site,
    route53_zone_lookup,
)


def _component_name(svc_name: str, stack: str, prefix: str) -> str:
    return f"{prefix}-{svc_name}-{stack}"


def main():
    """
    Build the site graph, apply it and export its outputs.

    Build errors are logged to the engine and re-raised, so nothing is
    deployed from a configuration that fails validation or zone lookup.
    """
    config = SiteConfig.from_pulumi_config(pulumi.Config())

    def name(prefix: str) -> str:
        return _component_name(config.svc_name, pulumi.get_stack(), prefix)

    try:
        graph = build_site(config, find_zone=route53_zone_lookup)
    except SiteBuildError as exc:
        pulumi.log.error(f"Site build failed ({exc.rule}): {exc}")
        raise

    site = PulumiBackend(
        name=name("site"),
        region=config.region,
        account=config.account,
    ).apply(graph)

    for output_name, value in site.outputs.items():
        pulumi.export(output_name, value)

    if config.assets_path:
        bucket = site.resources["webBucket"]
        distribution = site.resources["webDemoDist"]
        assets = AssetSync(name("assets"))
        assets.sync(
            config.assets_path,
            bucket.bucket,
            depends_on=[site.resources["webBucketOwnership"], site.resources["webBucketPolicy"]],
        )
        pulumi.export("cacheInvalidationCommand", assets.invalidate(distribution.id))


if __name__ == "__main__":
    main()
