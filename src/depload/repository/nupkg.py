"""Package archive helpers: nuspec parsing, entry classification and extraction.

Packages are extracted into ``<root>/<id>.<version>/`` with the nuspec and the
original archive kept alongside the payload.
"""
from __future__ import annotations

import logging
import os
import shutil
import urllib.parse
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from depload.constants import Constants
from depload.exceptions import InstallIOError
from depload.frameworks import FrameworkDescriptor
from depload.common.logging_utils import extra_context, is_debug_enabled

from .models import InstalledPackage, LibraryFile, NuspecMetadata

logger = logging.getLogger(__name__)


def _strip_namespaces(root: ET.Element) -> None:
    for elem in root.iter():
        if "}" in elem.tag:
            elem.tag = elem.tag.split("}")[1]


def parse_nuspec(data: bytes) -> NuspecMetadata:
    """Parse nuspec XML.

    Raises:
        ValueError: If the manifest is malformed or lacks id/version
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ValueError(f"Malformed nuspec: {e}") from e
    _strip_namespaces(root)
    metadata = root.find("metadata")
    if metadata is None:
        raise ValueError("nuspec has no metadata element")

    def text(tag: str) -> Optional[str]:
        elem = metadata.find(tag)
        if elem is not None and elem.text and elem.text.strip():
            return elem.text.strip()
        return None

    package_id = text("id")
    version = text("version")
    if not package_id or not version:
        raise ValueError("nuspec is missing id or version")

    groups: Dict[str, Tuple[str, ...]] = {}
    dependencies = metadata.find("dependencies")
    if dependencies is not None:
        loose = [d.get("id") for d in dependencies.findall("dependency") if d.get("id")]
        if loose:
            groups[""] = tuple(loose)
        for group in dependencies.findall("group"):
            framework = FrameworkDescriptor.parse(group.get("targetFramework"))
            key = framework.short_name if framework else ""
            ids = [d.get("id") for d in group.findall("dependency") if d.get("id")]
            groups[key] = groups.get(key, ()) + tuple(ids)

    return NuspecMetadata(
        package_id=package_id,
        version=version,
        title=text("title"),
        authors=text("authors"),
        description=text("description"),
        dependency_groups=groups,
    )


def _entry_name(name: str) -> str:
    # archive entries are percent-encoded (portable-net45%2Bwin8)
    return urllib.parse.unquote(name.replace("\\", "/"))


def _is_packaging_entry(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in Constants.PACKAGING_ENTRY_PREFIXES)


def classify_files(paths: Iterable[str]) -> Tuple[Tuple[str, ...], Tuple[LibraryFile, ...]]:
    """Split package-relative paths into content files and library files.

    ``lib/<tfm>/...`` files carry the parsed framework and files directly under
    ``lib/`` carry None. A ``lib/<folder>/`` that is not a framework name gets
    the unsupported descriptor, which no target accepts.
    """
    content: List[str] = []
    libraries: List[LibraryFile] = []
    for path in paths:
        segments = path.split("/")
        if len(segments) < 2 or not segments[-1]:
            continue
        top = segments[0]
        if top.lower() in (f.lower() for f in Constants.CONTENT_FOLDERS):
            content.append(path)
        elif top.lower() == Constants.LIB_FOLDER:
            framework = None
            if len(segments) > 2:
                framework = FrameworkDescriptor.parse(segments[1]) or FrameworkDescriptor.unsupported()
            libraries.append(LibraryFile(path, framework))
    return tuple(content), tuple(libraries)


def read_archive_nuspec(nupkg_path: Path) -> NuspecMetadata:
    """Read the manifest of a .nupkg without extracting it."""
    try:
        with zipfile.ZipFile(nupkg_path) as archive:
            for name in archive.namelist():
                if "/" not in name and name.lower().endswith(Constants.NUSPEC_EXTENSION):
                    return parse_nuspec(archive.read(name))
    except (zipfile.BadZipFile, OSError) as e:
        raise InstallIOError(f"Unable to read package archive {nupkg_path}: {e}") from e
    raise ValueError(f"No nuspec found in {nupkg_path}")


def package_directory_name(package_id: str, version: str) -> str:
    """Folder name of an installed package."""
    return f"{package_id}.{version}"


def extract_package(nupkg_path: Path, packages_root: Path, source: Optional[str] = None) -> InstalledPackage:
    """Extract an archive into ``packages_root/<id>.<version>/``.

    A partially extracted folder is removed again when extraction fails.

    Raises:
        InstallIOError: On unreadable archives, unsafe entries or disk failures
    """
    nuspec = read_archive_nuspec(nupkg_path)
    destination = packages_root / package_directory_name(nuspec.package_id, nuspec.version)
    dest_root = os.path.realpath(destination)
    try:
        destination.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(nupkg_path) as archive:
            for info in archive.infolist():
                name = _entry_name(info.filename)
                if info.is_dir() or _is_packaging_entry(name):
                    continue
                target = os.path.realpath(os.path.join(dest_root, name))
                if os.path.commonpath([dest_root, target]) != dest_root:
                    raise InstallIOError(
                        f"Archive entry escapes install folder: {info.filename}",
                        package_id=nuspec.package_id,
                        version=nuspec.version,
                        source=source,
                    )
                os.makedirs(os.path.dirname(target), exist_ok=True)
                with archive.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
        shutil.copy2(nupkg_path, destination / f"{package_directory_name(nuspec.package_id, nuspec.version)}{Constants.NUPKG_EXTENSION}")
    except InstallIOError:
        shutil.rmtree(destination, ignore_errors=True)
        raise
    except (zipfile.BadZipFile, OSError) as e:
        shutil.rmtree(destination, ignore_errors=True)
        raise InstallIOError(
            f"Unable to extract package: {e}",
            package_id=nuspec.package_id,
            version=nuspec.version,
            source=source,
        ) from e

    if is_debug_enabled(logger):
        logger.debug(
            "Extracted package",
            extra=extra_context(
                event="package_extracted",
                component="nupkg",
                action="extract",
                package_id=nuspec.package_id,
                version=nuspec.version,
                target=str(destination),
            ),
        )
    installed = read_installed_package(destination)
    if installed is None:
        raise InstallIOError(
            "Extracted package has no manifest",
            package_id=nuspec.package_id,
            version=nuspec.version,
            source=source,
        )
    return InstalledPackage(
        package_id=installed.package_id,
        version=installed.version,
        install_path=installed.install_path,
        content_files=installed.content_files,
        library_files=installed.library_files,
        source=source,
    )


def read_installed_package(package_dir: Path) -> Optional[InstalledPackage]:
    """Build an InstalledPackage from an extracted folder, or None if it has no manifest."""
    if not package_dir.is_dir():
        return None
    nuspecs = sorted(p for p in package_dir.iterdir() if p.is_file() and p.suffix.lower() == Constants.NUSPEC_EXTENSION)
    if not nuspecs:
        return None
    try:
        nuspec = parse_nuspec(nuspecs[0].read_bytes())
    except (ValueError, OSError) as e:
        logger.warning("Couldn't read manifest %s: %s", nuspecs[0], e)
        return None

    relative = sorted(
        p.relative_to(package_dir).as_posix()
        for p in package_dir.rglob("*")
        if p.is_file()
    )
    content, libraries = classify_files(relative)
    return InstalledPackage(
        package_id=nuspec.package_id,
        version=nuspec.version,
        install_path=package_dir,
        content_files=content,
        library_files=libraries,
    )
