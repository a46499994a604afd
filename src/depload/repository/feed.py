"""NuGet V3 HTTP feed.

Uses the service index to locate the flat container (version lists and
archive downloads) and the registration resource (listed/unlisted state).
"""
from __future__ import annotations

import logging
import urllib.parse
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from depload.constants import Constants
from depload.exceptions import InstallIOError
from depload.versioning import VersionRange, parse_version, pick_version
from depload.common import http_client
from depload.common.logging_utils import extra_context, is_debug_enabled, safe_url

from .base import Repository
from .models import PackageMetadata

logger = logging.getLogger(__name__)


def _normalize(version: str) -> str:
    try:
        return str(parse_version(version))
    except ValueError:
        return version


class FeedRepository(Repository):
    """Source backed by a NuGet V3 service index URL."""

    def __init__(self, source: str) -> None:
        super().__init__(source)
        self._service_index: Optional[Dict[str, Any]] = None

    def _resource(self, resource_type: str) -> Optional[str]:
        """Return the base URL of a service index resource, or None."""
        if self._service_index is None:
            status, data = http_client.get_json(self.source, context=self.source)
            if status != 200 or not isinstance(data, dict):
                logger.warning(
                    "Service index unavailable (HTTP %s): %s",
                    status,
                    safe_url(self.source),
                    extra=extra_context(
                        event="service_index",
                        component="feed",
                        outcome="unavailable",
                        status_code=status,
                        source=safe_url(self.source),
                    ),
                )
                self._service_index = {}
            else:
                self._service_index = data
        for resource in self._service_index.get("resources", []):
            if resource.get("@type") == resource_type and resource.get("@id"):
                base = resource["@id"]
                return base if base.endswith("/") else base + "/"
        return None

    def _fetch_versions(self, package_id: str) -> List[str]:
        base = self._resource(Constants.RESOURCE_PACKAGE_BASE_ADDRESS)
        if not base:
            return []
        encoded_id = urllib.parse.quote(package_id.lower(), safe="")
        status, data = http_client.get_json(f"{base}{encoded_id}/index.json", context=self.source)
        if status == 404:
            return []
        if status != 200 or not isinstance(data, dict):
            raise InstallIOError(
                f"Unexpected HTTP {status} listing versions",
                package_id=package_id,
                source=safe_url(self.source),
            )
        return [v for v in data.get("versions", []) if isinstance(v, str)]

    def _fetch_unlisted(self, package_id: str) -> Set[str]:
        """Normalized versions marked unlisted in the registration index."""
        base = self._resource(Constants.RESOURCE_REGISTRATIONS_BASE_URL)
        if not base:
            return set()
        encoded_id = urllib.parse.quote(package_id.lower(), safe="")
        status, data = http_client.get_json(f"{base}{encoded_id}/index.json", context=self.source)
        if status != 200 or not isinstance(data, dict):
            return set()

        unlisted: Set[str] = set()
        for page in data.get("items", []):
            leaves = page.get("items")
            if leaves is None and page.get("@id"):
                # large registrations page their leaves out
                _, page_data = http_client.get_json(page["@id"], context=self.source)
                leaves = (page_data or {}).get("items", [])
            for leaf in leaves or []:
                entry = leaf.get("catalogEntry", {})
                if entry.get("listed") is False and entry.get("version"):
                    unlisted.add(_normalize(entry["version"]))
        return unlisted

    def find(
        self,
        package_id: str,
        version_range: Optional[VersionRange] = None,
        allow_prerelease: bool = False,
        allow_unlisted: bool = False,
    ) -> Optional[PackageMetadata]:
        candidates = self._fetch_versions(package_id)
        if candidates and not allow_unlisted:
            unlisted = self._fetch_unlisted(package_id)
            if unlisted:
                candidates = [v for v in candidates if _normalize(v) not in unlisted]
        version = pick_version(candidates, version_range, allow_prerelease)
        if is_debug_enabled(logger):
            logger.debug(
                "Feed lookup",
                extra=extra_context(
                    event="package_lookup",
                    component="feed",
                    outcome="found" if version else "not_found",
                    package_id=package_id,
                    version=version,
                    count=len(candidates),
                    source=safe_url(self.source),
                ),
            )
        if version is None:
            return None
        base = self._resource(Constants.RESOURCE_PACKAGE_BASE_ADDRESS)
        lower_id = urllib.parse.quote(package_id.lower(), safe="")
        lower_version = version.lower()
        return PackageMetadata(
            package_id=package_id,
            version=version,
            source=self.source,
            download_url=f"{base}{lower_id}/{lower_version}/{lower_id}.{lower_version}{Constants.NUPKG_EXTENSION}",
        )

    def download(self, metadata: PackageMetadata, destination: Path) -> Path:
        if not metadata.download_url:
            raise InstallIOError(
                "No download location for package",
                package_id=metadata.package_id,
                version=metadata.version,
                source=safe_url(self.source),
            )
        target = destination / f"{metadata.package_id}.{metadata.version}{Constants.NUPKG_EXTENSION}"
        logger.info("Downloading %s %s from %s", metadata.package_id, metadata.version, safe_url(self.source))
        try:
            return http_client.download_file(metadata.download_url, target, context=self.source)
        except InstallIOError as e:
            raise InstallIOError(
                str(e),
                package_id=metadata.package_id,
                version=metadata.version,
                source=safe_url(self.source),
            ) from e
