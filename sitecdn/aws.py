"""
AWS backend: materializes a ResourceGraph as Pulumi resources.

``StaticSite`` is a ComponentResource that walks the graph in insertion order
and creates one pulumi_aws resource per node, all parented to the component
and bound to an explicit provider for the configured region. Ref, Concat and
Json values are resolved against resources created earlier in the walk, so a
node's Outputs (ARNs, ids, domain names) flow into the nodes that reference
it. Existing-certificate nodes create nothing; their ARN is used as given.

``route53_zone_lookup`` is the zone lookup used by the DNS stage.
"""

from typing import Any, Callable, Mapping

import pulumi
import pulumi_aws as aws

from sitecdn import graph as g
from sitecdn.errors import ProvisioningError, ZoneLookupError

ID: str = "sitecdn:aws:StaticSite"

RESOURCE_TYPES: dict[str, Callable[..., pulumi.CustomResource]] = {
    g.BUCKET: aws.s3.Bucket,
    g.BUCKET_PUBLIC_ACCESS_BLOCK: aws.s3.BucketPublicAccessBlock,
    g.BUCKET_OWNERSHIP_CONTROLS: aws.s3.BucketOwnershipControls,
    g.BUCKET_POLICY: aws.s3.BucketPolicy,
    g.ORIGIN_ACCESS_IDENTITY: aws.cloudfront.OriginAccessIdentity,
    g.CERTIFICATE: aws.acm.Certificate,
    g.IP_SET: aws.wafv2.IpSet,
    g.RULE_GROUP: aws.wafv2.RuleGroup,
    g.WEB_ACL: aws.wafv2.WebAcl,
    g.DISTRIBUTION: aws.cloudfront.Distribution,
    g.RECORD: aws.route53.Record,
}


def explicit_dependencies(node: g.ResourceNode) -> list[str]:
    """
    Dependencies of node that no property expresses.

    Refs are already ordered by their Outputs, so only the rest need an
    explicit depends_on.
    """
    return sorted(node.depends_on - g.collect_refs(node.properties))


class ExistingResource:
    """Stand-in for a resource that exists outside the stack (e.g. a certificate ARN)."""

    def __init__(self, properties: Mapping[str, Any]):
        self.properties = dict(properties)
        self.id = properties.get("id", properties.get("arn"))
        self.arn = properties.get("arn")


class StaticSite(pulumi.ComponentResource):
    """
    Every node of a site ResourceGraph, created under one component.

    Attributes:
        resources: logical id → created resource (or ExistingResource).
        outputs: output name → resolved value, in emission order.
    """

    def __init__(
        self,
        name: str,
        graph: g.ResourceGraph,
        region: str,
        account: str | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the provider and every resource in graph.

        Args:
            name: Pulumi resource name; prefixes every child resource name
                (e.g. "<name>-webBucket").
            graph: Complete graph returned by build_site.
            region: Region of the AWS provider the children use.
            account: If given, the provider refuses any other account.

        Raises:
            ProvisioningError: unknown node type, unresolved reference, or
                arguments the resource class rejects.
        """
        super().__init__(ID, name, None, opts)

        self.provider = aws.Provider(
            resource_name=f"{name}-aws",
            region=region,
            allowed_account_ids=[account] if account else None,
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.resources: dict[str, Any] = {}
        for node in graph:
            self.resources[node.logical_id] = self._materialize(name, node)

        self.outputs: dict[str, Any] = {
            output.name: self._resolve(output.value) for output in graph.outputs
        }
        self.register_outputs(self.outputs)

    def _materialize(self, name: str, node: g.ResourceNode) -> Any:
        if node.type == g.EXISTING_CERTIFICATE:
            return ExistingResource(node.properties)

        resource_cls = RESOURCE_TYPES.get(node.type)
        if resource_cls is None:
            raise ProvisioningError(f"No resource class for type '{node.type}' ({node.logical_id})")

        args = {key: self._resolve(value) for key, value in node.properties.items()}
        depends_on = [
            self.resources[dep]
            for dep in explicit_dependencies(node)
            if isinstance(self.resources.get(dep), pulumi.Resource)
        ]
        child_opts = pulumi.ResourceOptions(
            parent=self,
            provider=self.provider,
            depends_on=depends_on,
        )
        try:
            return resource_cls(f"{name}-{node.logical_id}", opts=child_opts, **args)
        except TypeError as exc:
            raise ProvisioningError(f"Cannot create '{node.logical_id}' ({node.type}): {exc}") from exc

    def _resolve(self, value: Any) -> Any:
        if isinstance(value, g.Ref):
            resource = self.resources.get(value.logical_id)
            if resource is None:
                raise ProvisioningError(f"Reference to '{value.logical_id}' before it was created")
            return getattr(resource, value.attribute)
        if isinstance(value, g.Concat):
            return pulumi.Output.concat(*[self._resolve(part) for part in value.parts])
        if isinstance(value, g.Json):
            return pulumi.Output.json_dumps(self._resolve(value.value))
        if isinstance(value, Mapping):
            return {key: self._resolve(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._resolve(item) for item in value]
        return value


class PulumiBackend:
    """Provisioning backend that applies a graph as a StaticSite component."""

    def __init__(self, name: str, region: str, account: str | None = None):
        self.name = name
        self.region = region
        self.account = account

    def apply(self, graph: g.ResourceGraph) -> StaticSite:
        pulumi.log.info(f"provisioning: {len(graph)} resources in {self.region}")
        return StaticSite(
            name=self.name,
            graph=graph,
            region=self.region,
            account=self.account,
        )


def route53_zone_lookup(domain: str) -> g.Zone:
    """
    Find the public hosted zone for domain.

    Raises:
        ZoneLookupError: the zone does not exist or the lookup failed.
    """
    try:
        result = aws.route53.get_zone(name=domain, private_zone=False)
    except Exception as exc:
        # Invoke failures surface as plain Exceptions from the engine.
        raise ZoneLookupError(f"Hosted zone lookup for '{domain}' failed: {exc}") from exc
    return g.Zone(zone_id=result.zone_id, name=result.name)
