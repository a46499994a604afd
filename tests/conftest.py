"""Shared fixtures: build real .nupkg archives and installed package folders on disk."""

import zipfile
from pathlib import Path
from typing import Iterable, Optional

import pytest

NUSPEC_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">
  <metadata>
    <id>{package_id}</id>
    <version>{version}</version>
    <authors>test</authors>
    <description>Test package {package_id}</description>
    {dependencies}
  </metadata>
</package>
"""


def nuspec_xml(package_id: str, version: str, dependencies: str = "") -> str:
    return NUSPEC_TEMPLATE.format(package_id=package_id, version=version, dependencies=dependencies)


def build_nupkg(
    directory: Path,
    package_id: str,
    version: str,
    files: Iterable[str] = (),
    dependencies: str = "",
    file_name: Optional[str] = None,
) -> Path:
    """Write a minimal package archive containing the given payload entries."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (file_name or f"{package_id}.{version}.nupkg")
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(f"{package_id}.nuspec", nuspec_xml(package_id, version, dependencies))
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("_rels/.rels", "<Relationships/>")
        archive.writestr("package/services/metadata/core-properties/1.psmdcp", "<coreProperties/>")
        for name in files:
            archive.writestr(name, b"payload")
    return path


def build_installed(root: Path, package_id: str, version: str, files: Iterable[str] = ()) -> Path:
    """Write an already-extracted package folder."""
    package_dir = root / f"{package_id}.{version}"
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / f"{package_id}.nuspec").write_text(nuspec_xml(package_id, version), encoding="utf-8")
    for name in files:
        target = package_dir / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"payload")
    return package_dir


@pytest.fixture
def feed_dir(tmp_path):
    """Empty local package source folder."""
    path = tmp_path / "feed"
    path.mkdir()
    return path


@pytest.fixture
def site_dir(tmp_path):
    """Host root directory."""
    path = tmp_path / "site"
    path.mkdir()
    return path
