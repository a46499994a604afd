"""Package repositories.

- models.py: package metadata and installed-package records
- base.py: Repository interface
- feed.py: NuGet V3 HTTP feeds
- local.py: local archive folders and the installed-packages root
- nupkg.py: archive reading and extraction
- aggregate.py: ordered multi-source composition
"""

from .aggregate import AggregateRepository, RepositoryFactory
from .base import Repository
from .feed import FeedRepository
from .local import InstalledPackageRepository, LocalFolderRepository
from .models import InstalledPackage, LibraryFile, NuspecMetadata, PackageMetadata

__all__ = [
    "AggregateRepository",
    "FeedRepository",
    "InstalledPackage",
    "InstalledPackageRepository",
    "LibraryFile",
    "LocalFolderRepository",
    "NuspecMetadata",
    "PackageMetadata",
    "Repository",
    "RepositoryFactory",
]
