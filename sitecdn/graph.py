"""
Resource graph: the plain-data description of the site handed to a backend.

Nodes never hold other nodes. A property that needs another resource's
generated attribute (ARN, id, domain name) holds a ``Ref`` naming the node
and the attribute; the backend resolves it after the referenced node has been
materialized. ``Concat`` and ``Json`` describe values derived from refs.

The graph is append-only and ordered: a node may only depend on nodes that
were added before it, so backends can materialize nodes in insertion order.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from sitecdn.errors import GraphError
from sitecdn.outputs import OutputEmitter, StackOutput

# Pulumi type tokens of the resources the site is made of.
BUCKET = "aws:s3/bucket:Bucket"
BUCKET_PUBLIC_ACCESS_BLOCK = "aws:s3/bucketPublicAccessBlock:BucketPublicAccessBlock"
BUCKET_OWNERSHIP_CONTROLS = "aws:s3/bucketOwnershipControls:BucketOwnershipControls"
BUCKET_POLICY = "aws:s3/bucketPolicy:BucketPolicy"
ORIGIN_ACCESS_IDENTITY = "aws:cloudfront/originAccessIdentity:OriginAccessIdentity"
CERTIFICATE = "aws:acm/certificate:Certificate"
IP_SET = "aws:wafv2/ipSet:IpSet"
RULE_GROUP = "aws:wafv2/ruleGroup:RuleGroup"
WEB_ACL = "aws:wafv2/webAcl:WebAcl"
DISTRIBUTION = "aws:cloudfront/distribution:Distribution"
RECORD = "aws:route53/record:Record"

# Wraps an existing certificate ARN; no physical resource is created.
EXISTING_CERTIFICATE = "sitecdn:acm:ExistingCertificate"

# Types that accept a ``tags`` argument. Graph-wide tags are merged into these.
TAGGABLE_TYPES = frozenset(
    {BUCKET, CERTIFICATE, IP_SET, RULE_GROUP, WEB_ACL, DISTRIBUTION}
)


@dataclass(frozen=True)
class Ref:
    """Back-reference to a generated attribute of another node."""

    logical_id: str
    attribute: str = "id"


@dataclass(frozen=True)
class Concat:
    """String built from literals and refs, e.g. ``https://`` + domain name."""

    parts: tuple[Any, ...]


@dataclass(frozen=True)
class Json:
    """Value serialized to a JSON string once every ref inside it resolves."""

    value: Any


@dataclass(frozen=True)
class Zone:
    """Hosted zone returned by a zone lookup."""

    zone_id: str
    name: str


@dataclass(frozen=True)
class ResourceNode:
    """
    One resource of the site.

    Attributes:
        logical_id: Unique name within the graph (e.g. "webAcl").
        type: Pulumi type token (see module constants).
        properties: Resource arguments; values may contain Ref/Concat/Json.
        depends_on: Logical ids this node needs. Refs found in properties are
            added automatically when the node joins a graph.
    """

    logical_id: str
    type: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    depends_on: frozenset[str] = frozenset()

    def ref(self, attribute: str = "id") -> Ref:
        return Ref(self.logical_id, attribute)


def collect_refs(value: Any) -> set[str]:
    """Return the logical ids referenced anywhere inside value."""
    if isinstance(value, Ref):
        return {value.logical_id}
    if isinstance(value, Concat):
        return collect_refs(value.parts)
    if isinstance(value, Json):
        return collect_refs(value.value)
    if isinstance(value, Mapping):
        value = list(value.values())
    if isinstance(value, (list, tuple)):
        found: set[str] = set()
        for item in value:
            found |= collect_refs(item)
        return found
    return set()


class ResourceGraph:
    """
    Ordered, append-only set of ResourceNodes plus the stack outputs.

    Two graphs compare equal when they hold equal nodes in the same order,
    equal outputs and equal tags.
    """

    def __init__(self, tags: Mapping[str, str] | None = None):
        self.tags: Mapping[str, str] = MappingProxyType(dict(tags or {}))
        self.outputs = OutputEmitter()
        self._nodes: dict[str, ResourceNode] = {}

    def add(self, node: ResourceNode) -> ResourceNode:
        """
        Append node and return the stored version.

        The stored node has its refs folded into depends_on, graph tags merged
        into its properties (taggable types only) and a read-only properties
        mapping. Raises GraphError on a duplicate id or unknown dependency.
        """
        if node.logical_id in self._nodes:
            raise GraphError(f"Duplicate resource '{node.logical_id}'")

        depends_on = frozenset(node.depends_on | collect_refs(node.properties))
        unknown = sorted(depends_on - self._nodes.keys())
        if unknown:
            raise GraphError(
                f"Resource '{node.logical_id}' depends on unknown resources: {', '.join(unknown)}"
            )

        properties = dict(node.properties)
        if self.tags and node.type in TAGGABLE_TYPES:
            properties["tags"] = {**self.tags, **properties.get("tags", {})}

        stored = replace(
            node,
            properties=MappingProxyType(properties),
            depends_on=depends_on,
        )
        self._nodes[node.logical_id] = stored
        return stored

    def emit(self, output: StackOutput) -> None:
        self.outputs.emit(output)

    def get(self, logical_id: str) -> ResourceNode:
        try:
            return self._nodes[logical_id]
        except KeyError:
            raise GraphError(f"Unknown resource '{logical_id}'") from None

    def __contains__(self, logical_id: object) -> bool:
        return logical_id in self._nodes

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> tuple[ResourceNode, ...]:
        return tuple(self._nodes.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceGraph):
            return NotImplemented
        return (
            self.nodes == other.nodes
            and self.outputs == other.outputs
            and dict(self.tags) == dict(other.tags)
        )
