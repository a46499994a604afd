"""Run configuration: sources, package requests and install options.

Loaded from YAML or JSON. Example::

    packages_path: packages
    update: false
    target_framework: net46
    on_not_found: skip
    sources:
      - https://my.feed.example/v3/index.json
    packages:
      - "Newtonsoft.Json:[12.0,13.0)"
      - id: My.Plugin
        version: 1.2.0
        prerelease: true
        sources: [./local-feed]
        exclusive: true
"""
from __future__ import annotations

import dataclasses
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from depload.constants import Constants, NotFoundPolicy
from depload.exceptions import SourceConfigurationError
from depload.frameworks import FrameworkDescriptor
from depload.package_request import PackageRequest

logger = logging.getLogger(__name__)


def tokenize_rightmost_colon(s: str) -> Tuple[str, Optional[str]]:
    """Return (identifier, spec or None) using the rightmost-colon rule."""
    s = s.strip()
    if ":" not in s:
        return s, None
    identifier, spec = s.rsplit(":", 1)
    return identifier.strip(), (spec.strip() or None)


def parse_package_token(token: str) -> PackageRequest:
    """Parse ``Id`` or ``Id:versionSpec`` into a request using the global sources."""
    identifier, spec = tokenize_rightmost_colon(token)
    if spec is not None and spec.lower() == "latest":
        spec = None
    return PackageRequest(package_id=identifier, version_spec=spec)


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "1", "false", "no", "0"):
        return value.strip().lower() in ("true", "yes", "1")
    raise SourceConfigurationError(f"'{key}' must be a boolean, got {value!r}")


def _package_from_entry(entry: Any) -> PackageRequest:
    if isinstance(entry, str):
        return parse_package_token(entry)
    if not isinstance(entry, Mapping):
        raise SourceConfigurationError(f"Invalid package entry: {entry!r}")
    sources = entry.get("sources") or ()
    if isinstance(sources, str):
        sources = (sources,)
    version = entry.get("version")
    return PackageRequest(
        package_id=str(entry.get("id") or ""),
        sources=tuple(str(s) for s in sources),
        version_spec=str(version) if version is not None else None,
        allow_prerelease=_as_bool(entry.get("prerelease", False), "prerelease"),
        allow_unlisted=_as_bool(entry.get("unlisted", False), "unlisted"),
        exclusive=_as_bool(entry.get("exclusive", False), "exclusive"),
    )


@dataclass(frozen=True)
class InstallerConfig:
    """Immutable installer configuration.

    ``sources`` are in priority order, index 0 queried first, and all rank
    ahead of the default public source when ``include_default_source`` is set.
    """

    sources: Tuple[str, ...] = ()
    packages: Tuple[PackageRequest, ...] = ()
    packages_path: str = Constants.DEFAULT_PACKAGES_PATH
    update_packages: bool = False
    target_framework: str = Constants.DEFAULT_TARGET_FRAMEWORK
    not_found_policy: NotFoundPolicy = NotFoundPolicy.SKIP
    include_default_source: bool = True

    def __post_init__(self) -> None:
        if not self.packages_path or not str(self.packages_path).strip():
            raise SourceConfigurationError("packages_path must not be empty")
        if FrameworkDescriptor.parse(self.target_framework) is None:
            raise SourceConfigurationError(f"Unknown target framework: {self.target_framework!r}")

    @property
    def target(self) -> FrameworkDescriptor:
        return FrameworkDescriptor.parse(self.target_framework)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "InstallerConfig":
        """Build a config from a parsed YAML/JSON mapping."""
        data = data or {}
        if not isinstance(data, Mapping):
            raise SourceConfigurationError("Configuration root must be a mapping")
        sources = data.get("sources") or ()
        if isinstance(sources, str):
            sources = (sources,)
        policy = str(data.get("on_not_found", NotFoundPolicy.SKIP.value)).lower()
        try:
            not_found_policy = NotFoundPolicy(policy)
        except ValueError as e:
            raise SourceConfigurationError(f"Unknown on_not_found policy: {policy!r}") from e
        return cls(
            sources=tuple(str(s) for s in sources if s),
            packages=tuple(_package_from_entry(p) for p in data.get("packages") or ()),
            packages_path=str(data.get("packages_path") or Constants.DEFAULT_PACKAGES_PATH),
            update_packages=_as_bool(data.get("update", False), "update"),
            target_framework=str(data.get("target_framework") or Constants.DEFAULT_TARGET_FRAMEWORK),
            not_found_policy=not_found_policy,
            include_default_source=_as_bool(data.get("default_source", True), "default_source"),
        )

    def with_overrides(self, **changes: Any) -> "InstallerConfig":
        """Copy with the given fields replaced; None values are ignored."""
        return dataclasses.replace(self, **{k: v for k, v in changes.items() if v is not None})


def apply_env_overrides(config: InstallerConfig, environ: Optional[Mapping[str, str]] = None) -> InstallerConfig:
    """Apply DEPLOAD_* environment overrides."""
    environ = os.environ if environ is None else environ
    return config.with_overrides(
        packages_path=environ.get(Constants.ENV_PACKAGES_PATH) or None,
        target_framework=environ.get(Constants.ENV_TARGET_FRAMEWORK) or None,
    )


def load_config(path: str) -> InstallerConfig:
    """Load a YAML (.yml/.yaml) or JSON configuration file.

    Raises:
        FileNotFoundError: If the file does not exist
        SourceConfigurationError: If the content is invalid
    """
    config_path = Path(path)
    with open(config_path, encoding="utf-8") as fh:
        try:
            if config_path.suffix.lower() == ".json":
                data: Dict[str, Any] = json.load(fh)
            else:
                data = yaml.safe_load(fh)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SourceConfigurationError(f"Couldn't parse configuration {path}: {e}") from e
    logger.debug("Loaded configuration from %s", config_path)
    return apply_env_overrides(InstallerConfig.from_dict(data))
