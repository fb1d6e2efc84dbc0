"""
Site origin: private S3 bucket readable only through a CloudFront identity.

The bucket blocks all public access. CloudFront reads it through an Origin
Access Identity, which the bucket policy grants object read and list access
(list lets missing keys return 404 instead of 403). The bucket is not deleted
with the stack while it still holds objects.
"""

from dataclasses import dataclass

import pulumi

from sitecdn.config import SiteConfig
from sitecdn.graph import (
    BUCKET,
    BUCKET_OWNERSHIP_CONTROLS,
    BUCKET_POLICY,
    BUCKET_PUBLIC_ACCESS_BLOCK,
    ORIGIN_ACCESS_IDENTITY,
    Concat,
    Json,
    ResourceGraph,
    ResourceNode,
)

# Applied to the site bucket. Used by tests to assert on secure defaults.
S3_BLOCK_PUBLIC_ACCESS: dict[str, bool] = {
    "block_public_acls": True,
    "block_public_policy": True,
    "ignore_public_acls": True,
    "restrict_public_buckets": True,
}


@dataclass(frozen=True)
class Origin:
    bucket: ResourceNode
    identity: ResourceNode


def _read_policy(bucket: ResourceNode, identity: ResourceNode) -> Json:
    principal = {"AWS": identity.ref("iam_arn")}
    return Json(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": principal,
                    "Action": ["s3:GetObject"],
                    "Resource": [Concat((bucket.ref("arn"), "/*"))],
                },
                {
                    "Effect": "Allow",
                    "Principal": principal,
                    "Action": ["s3:ListBucket"],
                    "Resource": [bucket.ref("arn")],
                },
            ],
        }
    )


def build_origin(config: SiteConfig, graph: ResourceGraph) -> Origin:
    bucket = graph.add(
        ResourceNode(
            "webBucket",
            BUCKET,
            {"force_destroy": False},
        )
    )
    graph.add(
        ResourceNode(
            "webBucketPublicAccessBlock",
            BUCKET_PUBLIC_ACCESS_BLOCK,
            {"bucket": bucket.ref("id"), **S3_BLOCK_PUBLIC_ACCESS},
        )
    )
    # Synced assets are uploaded with a private ACL, which needs ACLs enabled.
    graph.add(
        ResourceNode(
            "webBucketOwnership",
            BUCKET_OWNERSHIP_CONTROLS,
            {
                "bucket": bucket.ref("id"),
                "rule": {"object_ownership": "BucketOwnerPreferred"},
            },
        )
    )
    identity = graph.add(
        ResourceNode(
            "oai",
            ORIGIN_ACCESS_IDENTITY,
            {"comment": f"{config.svc_name} CF Distribution"},
        )
    )
    graph.add(
        ResourceNode(
            "webBucketPolicy",
            BUCKET_POLICY,
            {"bucket": bucket.ref("id"), "policy": _read_policy(bucket, identity)},
            depends_on=frozenset({"webBucketPublicAccessBlock"}),
        )
    )
    pulumi.log.info("origin: private bucket with origin access identity")
    return Origin(bucket=bucket, identity=identity)
