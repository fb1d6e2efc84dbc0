"""End-to-end tests for build_site"""

import pytest

from conftest import CIDRS, make_config
from sitecdn import builder, errors
from sitecdn.builder import build_site
from sitecdn.graph import ResourceGraph
from sitecdn.origin import S3_BLOCK_PUBLIC_ACCESS


@pytest.fixture
def graph_spy(monkeypatch):
    """Records every ResourceGraph the builder creates."""
    created = []

    class SpyGraph(ResourceGraph):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            created.append(self)

    monkeypatch.setattr(builder, "ResourceGraph", SpyGraph)
    return created


class TestScenarios:
    def test_a_default_domain_only(self, zones):
        graph = build_site(make_config(use_custom_domain=False, create_waf_acl=False), zones)
        assert graph.outputs.names() == ["defaultUrl"]
        assert zones.calls == []

    def test_b_custom_domain_without_certificate(self, graph_spy):
        config = make_config(use_custom_domain=True, create_cert=False, cert_arn="")
        with pytest.raises(errors.UseCustomDomainRequiresCertificate):
            build_site(config)
        assert graph_spy == []

    def test_c_empty_allow_list(self, graph_spy):
        with pytest.raises(errors.EmptyAllowList):
            build_site(make_config(create_waf_acl=True, allow_cidrs=(), region="us-east-1"))
        assert graph_spy == []

    def test_d_access_policy_outside_us_east_1(self, graph_spy):
        config = make_config(create_waf_acl=True, allow_cidrs=CIDRS, region="eu-west-1")
        with pytest.raises(errors.AccessPolicyRegionMismatch):
            build_site(config)
        assert graph_spy == []

    def test_e_everything_enabled(self, full_config, zones):
        graph = build_site(full_config, zones)
        assert graph.outputs.names() == ["accessPolicyId", "defaultUrl", "customUrl"]
        assert [node.logical_id for node in graph] == [
            "webBucket",
            "webBucketPublicAccessBlock",
            "webBucketOwnership",
            "oai",
            "webBucketPolicy",
            "cfCert",
            "ipSet",
            "wafRules",
            "webAcl",
            "webDemoDist",
            "cfAlias",
        ]

    def test_zone_lookup_failure_aborts(self, full_config):
        with pytest.raises(errors.ZoneLookupError):
            build_site(full_config, lambda domain: None)


class TestBuildSite:
    def test_is_deterministic(self, full_config, zones):
        assert build_site(full_config, zones) == build_site(full_config, zones)

    def test_tags_every_taggable_resource(self, full_config, zones):
        graph = build_site(full_config, zones)
        tagged = [node.logical_id for node in graph if "tags" in node.properties]
        assert tagged == ["webBucket", "cfCert", "ipSet", "wafRules", "webAcl", "webDemoDist"]
        assert all(graph.get(i).properties["tags"] == {"Service": "webdemo"} for i in tagged)

    def test_bucket_is_private(self, zones):
        graph = build_site(make_config(), zones)
        block = graph.get("webBucketPublicAccessBlock")
        for key, value in S3_BLOCK_PUBLIC_ACCESS.items():
            assert block.properties[key] is value

    def test_bucket_policy_grants_origin_identity(self, zones):
        graph = build_site(make_config(), zones)
        policy = graph.get("webBucketPolicy")
        assert policy.depends_on == frozenset({"webBucket", "oai", "webBucketPublicAccessBlock"})

    def test_dependencies_point_backwards(self, full_config, zones):
        seen = set()
        for node in build_site(full_config, zones):
            assert node.depends_on <= seen
            seen.add(node.logical_id)

    def test_config_is_not_mutated(self, full_config, zones):
        before = repr(full_config)
        build_site(full_config, zones)
        assert repr(full_config) == before
