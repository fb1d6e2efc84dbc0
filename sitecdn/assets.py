"""
Asset deployment for the site bucket.

Runs after the graph is applied and is not part of the build: ``sync`` uploads
a local folder to the bucket with pulumi_synced_folder, and ``invalidate``
produces the AWS CLI command that clears the CloudFront cache for new
content.
"""

from pathlib import Path
from typing import Iterable

import pulumi
import pulumi_synced_folder as synced_folder

from sitecdn._helpers import invalidation_command
from sitecdn.errors import ConfigurationError

ID: str = "sitecdn:aws:AssetSync"


class AssetSync(pulumi.ComponentResource):
    """Uploads site assets and describes how to invalidate the CDN cache."""

    def __init__(self, name: str, opts: pulumi.ResourceOptions | None = None):
        super().__init__(ID, name, None, opts)
        self._name = name
        self.register_outputs({})

    def sync(
        self,
        local_path: str,
        bucket_name: pulumi.Input[str],
        depends_on: list[pulumi.Resource] | None = None,
    ) -> synced_folder.S3BucketFolder:
        """
        Keep bucket_name in sync with local_path.

        Objects are private; the bucket must have ACLs enabled (see the
        ownership controls created with the origin).

        Raises:
            ConfigurationError: local_path is not a directory.
        """
        if not Path(local_path).is_dir():
            raise ConfigurationError(f"assetsPath '{local_path}' is not a directory")
        pulumi.log.info(f"assets: syncing {local_path}")
        return synced_folder.S3BucketFolder(
            f"{self._name}-folder",
            path=local_path,
            bucket_name=bucket_name,
            acl="private",
            managed_objects=True,
            opts=pulumi.ResourceOptions(parent=self, depends_on=depends_on or []),
        )

    def invalidate(
        self,
        distribution_id: pulumi.Input[str],
        paths: Iterable[str] = ("/*",),
    ) -> pulumi.Output[str]:
        paths = tuple(paths)
        return pulumi.Output.from_input(distribution_id).apply(
            lambda dist_id: invalidation_command(dist_id, paths)
        )
