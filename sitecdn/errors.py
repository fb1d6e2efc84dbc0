"""
Exception hierarchy for the site build.

Every error raised while composing the resource graph derives from
``SiteBuildError`` and propagates unmodified to the entrypoint. Configuration
errors are raised before any ResourceNode exists; region constraint errors are
a kind of configuration error so callers can catch both with one clause.
"""


class SiteBuildError(Exception):
    """Base class for all build failures."""

    rule: str = "SiteBuildError"


class ConfigurationError(SiteBuildError):
    """A cross-field precondition on the site configuration does not hold."""

    rule = "ConfigurationError"


class UseCustomDomainRequiresCertificate(ConfigurationError):
    rule = "UseCustomDomainRequiresCertificate"


class EmptyAllowList(ConfigurationError):
    rule = "EmptyAllowList"


class RegionConstraintError(ConfigurationError):
    """A resource that CloudFront consumes must be created in us-east-1."""

    rule = "RegionConstraintError"


class CertificateRegionMismatch(RegionConstraintError):
    rule = "CertificateRegionMismatch"


class AccessPolicyRegionMismatch(RegionConstraintError):
    rule = "AccessPolicyRegionMismatch"


class ZoneLookupError(SiteBuildError):
    """The hosted zone for the root domain could not be resolved."""

    rule = "ZoneLookupError"


class GraphError(SiteBuildError):
    """Duplicate logical id, unknown dependency, or a stage missing an upstream node."""

    rule = "GraphError"


class OverlayConflictError(SiteBuildError):
    """Two distribution overlays tried to set the same property."""

    rule = "OverlayConflictError"


class ProvisioningError(SiteBuildError):
    """The provisioning backend failed to materialize the graph."""

    rule = "ProvisioningError"
