"""Shared site configurations for the build tests."""

import pytest

from sitecdn.config import SiteConfig
from sitecdn.graph import Zone

CIDRS = ("1.2.3.0/24",)


def make_config(**overrides) -> SiteConfig:
    values = {
        "svc_name": "webdemo",
        "root_domain": "example.com",
        "hostname": "demo",
        "region": "us-east-1",
    }
    values.update(overrides)
    return SiteConfig(**values)


class FakeZones:
    """Zone lookup that records the domains it was asked for."""

    def __init__(self, zones: dict[str, str] | None = None):
        self.zones = zones if zones is not None else {"example.com": "Z0123456789"}
        self.calls: list[str] = []

    def __call__(self, domain: str) -> Zone | None:
        self.calls.append(domain)
        zone_id = self.zones.get(domain)
        return Zone(zone_id=zone_id, name=f"{domain}.") if zone_id else None


@pytest.fixture
def zones() -> FakeZones:
    return FakeZones()


@pytest.fixture
def full_config() -> SiteConfig:
    return make_config(
        use_custom_domain=True,
        create_cert=True,
        create_dns=True,
        create_waf_acl=True,
        allow_cidrs=CIDRS,
    )
