"""Command line interface for DepLoad.

    depload install -c depload.yml [--update] [--source URL] [-p Id:version]
    depload assemblies [--framework net46] [--packages-path packages]
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from depload import __version__
from depload.config import InstallerConfig, apply_env_overrides, load_config, parse_package_token
from depload.constants import Constants, ExitCodes, NotFoundPolicy
from depload.exceptions import InstallIOError, PackageNotFoundError, SourceConfigurationError
from depload.filesystem import FileSystem
from depload.frameworks import FrameworkDescriptor
from depload.installer import InstallOutcome, PackageInstaller
from depload.common.logging_utils import configure_logging, extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--root",
                        dest="ROOT",
                        help="Root directory that relative paths are resolved against (default: cwd)",
                        action="store",
                        type=str)
    parser.add_argument("--packages-path",
                        dest="PACKAGES_PATH",
                        help=f"Folder packages are installed into (default: {Constants.DEFAULT_PACKAGES_PATH})",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depload",
        description="DepLoad - plugin package installer and assembly resolver",
        add_help=True,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="COMMAND", required=True)

    install = subparsers.add_parser("install", help="Install configured packages")
    _add_common_arguments(install)
    install.add_argument("-s", "--source",
                         dest="SOURCES",
                         help="Additional package source, queried before configured sources (repeatable)",
                         action="append",
                         type=str,
                         default=[])
    install.add_argument("-p", "--package",
                         dest="PACKAGES",
                         help="Package to install as Id or Id:versionSpec (repeatable)",
                         action="append",
                         type=str,
                         default=[])
    install.add_argument("-u", "--update",
                         dest="UPDATE",
                         help="Update already installed packages to the newest matching version",
                         action="store_true")
    install.add_argument("--on-not-found",
                         dest="ON_NOT_FOUND",
                         help="What to do when a package is not found (default: skip)",
                         action="store",
                         type=str.lower,
                         choices=[p.value for p in NotFoundPolicy])
    install.add_argument("--error-on-warnings",
                         dest="ERROR_ON_WARNINGS",
                         help="Exit with a non-zero status code if any package was skipped.",
                         action="store_true")

    assemblies = subparsers.add_parser("assemblies", help="List assemblies compatible with a target framework")
    _add_common_arguments(assemblies)
    assemblies.add_argument("-f", "--framework",
                            dest="FRAMEWORK",
                            help=f"Target framework (default: {Constants.DEFAULT_TARGET_FRAMEWORK})",
                            action="store",
                            type=str)

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> InstallerConfig:
    """Merge the config file, environment and CLI flags (CLI wins)."""
    if getattr(args, "CONFIG", None):
        config = load_config(args.CONFIG)
    else:
        config = apply_env_overrides(InstallerConfig())

    sources = getattr(args, "SOURCES", None) or []
    packages = [parse_package_token(token) for token in getattr(args, "PACKAGES", None) or []]
    policy = getattr(args, "ON_NOT_FOUND", None)
    return config.with_overrides(
        sources=tuple(sources) + config.sources if sources else None,
        packages=config.packages + tuple(packages) if packages else None,
        packages_path=getattr(args, "PACKAGES_PATH", None),
        update_packages=True if getattr(args, "UPDATE", False) else None,
        not_found_policy=NotFoundPolicy(policy) if policy else None,
        target_framework=getattr(args, "FRAMEWORK", None),
    )


def _output(args: argparse.Namespace, line: str) -> None:
    if not args.QUIET:
        print(line)


def run_install(args: argparse.Namespace, config: InstallerConfig) -> ExitCodes:
    file_system = FileSystem(args.ROOT)
    installer = PackageInstaller.from_config(config, file_system)
    results = installer.install_packages(config.update_packages, config.not_found_policy)
    for result in results:
        if result.outcome is InstallOutcome.FOUND:
            _output(args, f"{result.package.package_id} {result.package.version} -> {result.package.install_path}")
        else:
            _output(args, f"{result.request.package_id}: not found")
    for input_path in file_system.input_paths:
        _output(args, f"input path: {input_path}")
    missing = [r for r in results if r.outcome is InstallOutcome.NOT_FOUND]
    if missing and args.ERROR_ON_WARNINGS:
        return ExitCodes.PACKAGE_NOT_FOUND
    return ExitCodes.SUCCESS


def run_assemblies(args: argparse.Namespace, config: InstallerConfig) -> ExitCodes:
    installer = PackageInstaller.from_config(config, FileSystem(args.ROOT))
    target = FrameworkDescriptor.parse(config.target_framework)
    for path in installer.get_compatible_assembly_paths(target):
        _output(args, str(path))
    return ExitCodes.SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )

    try:
        config = build_config(args)
        if args.COMMAND == "install":
            code = run_install(args, config)
        else:
            code = run_assemblies(args, config)
    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        code = ExitCodes.FILE_ERROR
    except SourceConfigurationError as e:
        logger.error("Configuration error: %s", e)
        code = ExitCodes.CONFIG_ERROR
    except PackageNotFoundError as e:
        logger.error("%s", e)
        code = ExitCodes.PACKAGE_NOT_FOUND
    except InstallIOError as e:
        logger.error("Install failed: %s", e)
        code = ExitCodes.CONNECTION_ERROR
    return code.value


if __name__ == "__main__":
    sys.exit(main())
