"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    PACKAGE_NOT_FOUND = 3
    CONFIG_ERROR = 4


class NotFoundPolicy(Enum):
    """What the installer does when no source has a requested package.

    Args:
        Enum (string): Policy names as accepted in config files and on the CLI.
    """

    SKIP = "skip"
    ABORT = "abort"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_PACKAGE_SOURCE = "https://api.nuget.org/v3/index.json"
    DEFAULT_PACKAGES_PATH = "packages"
    DEFAULT_TARGET_FRAMEWORK = "net46"
    ASSEMBLY_EXTENSIONS = (".dll",)
    NUSPEC_EXTENSION = ".nuspec"
    NUPKG_EXTENSION = ".nupkg"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 65536

    # NuGet V3 service index resource types
    RESOURCE_PACKAGE_BASE_ADDRESS = "PackageBaseAddress/3.0.0"
    RESOURCE_REGISTRATIONS_BASE_URL = "RegistrationsBaseUrl/3.6.0"

    # Environment overrides
    ENV_PACKAGES_PATH = "DEPLOAD_PACKAGES_PATH"
    ENV_TARGET_FRAMEWORK = "DEPLOAD_TARGET_FRAMEWORK"

    # Archive entries that belong to the OPC container, not the package payload
    PACKAGING_ENTRY_PREFIXES = ("_rels/", "package/", "[Content_Types].xml")
    CONTENT_FOLDERS = ("content", "contentFiles")
    LIB_FOLDER = "lib"
