"""Tests for the Pulumi backend, run against the Pulumi mock engine"""

from types import SimpleNamespace

import pulumi
import pulumi_aws as aws
import pytest

from conftest import FakeZones, make_config

CERT_ARN = "arn:aws:acm:us-east-1:123456789012:certificate/abc"
DIST_DOMAIN = "d111111abcdef8.cloudfront.net"


class SiteMocks(pulumi.runtime.Mocks):
    def __init__(self):
        self.inputs: dict[str, dict] = {}

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        self.inputs[args.name] = dict(args.inputs)
        outputs = dict(args.inputs)
        if args.typ == "aws:cloudfront/distribution:Distribution":
            outputs.update(domainName=DIST_DOMAIN, hostedZoneId="Z2FDTNDATAQYW2")
        elif args.typ == "aws:s3/bucket:Bucket":
            outputs.update(
                arn=f"arn:aws:s3:::{args.name}",
                bucket=args.name,
                bucketRegionalDomainName=f"{args.name}.s3.us-east-1.amazonaws.com",
            )
        elif args.typ == "aws:cloudfront/originAccessIdentity:OriginAccessIdentity":
            outputs.update(
                iamArn=f"arn:aws:iam::cloudfront:user/{args.name}",
                cloudfrontAccessIdentityPath=f"origin-access-identity/cloudfront/{args.name}",
            )
        elif args.typ.startswith("aws:wafv2/") or args.typ == "aws:acm/certificate:Certificate":
            outputs["arn"] = f"arn:aws:{args.typ.split(':')[1].split('/')[0]}::{args.name}"
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}


MOCKS = SiteMocks()
pulumi.runtime.set_mocks(MOCKS, preview=False)

from pulumi_synced_folder import S3BucketFolder  # noqa: E402

from sitecdn.assets import AssetSync  # noqa: E402
from sitecdn.aws import (  # noqa: E402
    ExistingResource,
    PulumiBackend,
    StaticSite,
    explicit_dependencies,
    route53_zone_lookup,
)
from sitecdn.builder import build_site  # noqa: E402
from sitecdn.errors import ConfigurationError, ZoneLookupError  # noqa: E402


def _site(name, **overrides):
    graph = build_site(make_config(**overrides), FakeZones())
    return StaticSite(name, graph, region="us-east-1")


@pulumi.runtime.test
def test_default_url_uses_distribution_domain():
    site = _site("default-url")

    def check(url):
        assert url == f"https://{DIST_DOMAIN}"

    return site.outputs["defaultUrl"].apply(check)


@pulumi.runtime.test
def test_distribution_references_web_acl_arn():
    site = _site("waf", create_waf_acl=True, allow_cidrs=("1.2.3.0/24",))

    def check(args):
        web_acl_id, acl_arn = args
        assert web_acl_id == acl_arn
        assert acl_arn.endswith("waf-webAcl")

    return pulumi.Output.all(
        site.resources["webDemoDist"].web_acl_id,
        site.resources["webAcl"].arn,
    ).apply(check)


@pulumi.runtime.test
def test_bucket_is_tagged_with_service():
    site = _site("tags")

    def check(tags):
        assert tags == {"Service": "webdemo"}

    return site.resources["webBucket"].tags.apply(check)


@pulumi.runtime.test
def test_referenced_certificate_creates_nothing():
    site = _site("existing-cert", use_custom_domain=True, cert_arn=CERT_ARN)
    assert isinstance(site.resources["rootCfCertificate"], ExistingResource)

    def check(viewer_certificate):
        assert viewer_certificate.acm_certificate_arn == CERT_ARN
        assert viewer_certificate.minimum_protocol_version == "TLSv1.2_2019"

    return site.resources["webDemoDist"].viewer_certificate.apply(check)


@pulumi.runtime.test
def test_alias_record_targets_distribution():
    site = _site("alias", use_custom_domain=True, create_cert=True, create_dns=True)
    assert site.outputs["customUrl"] == "https://demo.example.com"

    def check(aliases):
        (alias,) = aliases
        assert alias.name == DIST_DOMAIN
        assert alias.zone_id == "Z2FDTNDATAQYW2"

    return site.resources["cfAlias"].aliases.apply(check)


class TestRoute53ZoneLookup:
    def test_returns_zone(self, monkeypatch):
        monkeypatch.setattr(
            aws.route53,
            "get_zone",
            lambda name, private_zone: SimpleNamespace(zone_id="Z0123", name=f"{name}."),
        )
        zone = route53_zone_lookup("example.com")
        assert zone.zone_id == "Z0123"
        assert zone.name == "example.com."

    def test_wraps_lookup_failure(self, monkeypatch):
        def fail(name, private_zone):
            raise Exception("no matching Route53Zone found")

        monkeypatch.setattr(aws.route53, "get_zone", fail)
        with pytest.raises(ZoneLookupError, match="example.com"):
            route53_zone_lookup("example.com")


@pulumi.runtime.test
def test_backend_apply_pins_account():
    graph = build_site(make_config(create_waf_acl=True, allow_cidrs=("1.2.3.0/24",)), FakeZones())
    site = PulumiBackend(name="backend", region="us-east-1", account="123456789012").apply(graph)
    assert isinstance(site, StaticSite)
    assert set(site.resources) == {node.logical_id for node in graph}
    assert list(site.outputs) == ["accessPolicyId", "defaultUrl"]

    def check(url):
        assert url == f"https://{DIST_DOMAIN}"
        provider_inputs = MOCKS.inputs["backend-aws"]
        assert provider_inputs["region"] == "us-east-1"
        assert "123456789012" in str(provider_inputs["allowedAccountIds"])

    return site.outputs["defaultUrl"].apply(check)


@pulumi.runtime.test
def test_invalidate_builds_cli_command():
    assets = AssetSync("invalidate-assets")

    def check(command):
        assert command == "aws cloudfront create-invalidation --distribution-id E123 --paths '/*'"

    return assets.invalidate("E123").apply(check)


class TestAssetSync:
    def test_missing_folder_is_rejected(self, tmp_path):
        assets = AssetSync("missing-assets")
        with pytest.raises(ConfigurationError, match="not a directory"):
            assets.sync(str(tmp_path / "web"), "site-bucket")

    def test_syncs_existing_folder(self, tmp_path):
        (tmp_path / "index.html").write_text("<h1>demo</h1>")
        assets = AssetSync("folder-assets")
        folder = assets.sync(str(tmp_path), "site-bucket")
        assert isinstance(folder, S3BucketFolder)


class TestExplicitDependencies:
    def test_drops_dependencies_expressed_by_refs(self):
        graph = build_site(make_config(), FakeZones())
        assert explicit_dependencies(graph.get("webBucketPolicy")) == ["webBucketPublicAccessBlock"]
        assert explicit_dependencies(graph.get("webDemoDist")) == []
