"""
Self-test for the bundled native libraries.

    python -m turnkey [--json]

Reports the host, the identified platform and which bundled libraries
exist, then loads them and prints the engine version.
"""

from __future__ import annotations

import argparse
import logging
import platform as host
import sys
from typing import Dict, List, Optional

from pydantic import BaseModel

from .core.config import settings
from .engine import NativeEngine
from .loader import LibraryDescriptor, NativeLoader, NativeLoaderError, native_loader
from .loader.platform import host_environment


class LibraryReport(BaseModel):
    name: str
    resource_path: str
    present: bool


class LoaderReport(BaseModel):
    system: Dict[str, str]
    platform: Optional[str] = None
    libraries: List[LibraryReport] = []
    state: str
    version: Optional[str] = None
    error: Optional[str] = None


def get_system_info() -> Dict[str, str]:
    """Raw host information, as reported by the interpreter."""
    os_name, machine = host_environment()
    return {
        "platform": host.system(),
        "platform_release": host.release(),
        "architecture": host.machine(),
        "reported_os": os_name,
        "reported_arch": machine,
        "python_version": host.python_version(),
    }


def build_report(loader: NativeLoader) -> LoaderReport:
    report = LoaderReport(system=get_system_info(), state=loader.state.value)

    try:
        current = loader.identify_platform()
    except NativeLoaderError as exc:
        report.error = str(exc)
        return report
    report.platform = current.directory

    for name in (loader.settings.ENGINE_LIBRARY, loader.settings.SHIM_LIBRARY):
        descriptor = LibraryDescriptor.describe(current, name)
        stream = loader.resources.open(descriptor.resource_path)
        if stream is not None:
            stream.close()
        report.libraries.append(LibraryReport(
            name=name,
            resource_path=descriptor.resource_path,
            present=stream is not None,
        ))

    try:
        report.version = NativeEngine(loader).get_full_version()
    except NativeLoaderError as exc:
        report.error = f"{type(exc).__name__}: {exc}"
    report.state = loader.state.value
    return report


def print_report(report: LoaderReport) -> None:
    print("=" * 60)
    print("Solver TurnKey self-test")
    print("=" * 60)
    for key, value in report.system.items():
        print(f"  {key:<18} {value}")
    print(f"\nPlatform: {report.platform or 'unsupported'}")
    for lib in report.libraries:
        mark = "ok" if lib.present else "MISSING"
        print(f"  [{mark:>7}] {lib.name:<10} {lib.resource_path}")
    print(f"\nLoader state: {report.state}")
    if report.version:
        print(f"Engine version: {report.version}")
    if report.error:
        print(f"Error: {report.error}")


def main(argv: Optional[List[str]] = None, loader: Optional[NativeLoader] = None) -> int:
    parser = argparse.ArgumentParser(prog="turnkey", description="Check the bundled native libraries")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    report = build_report(loader if loader is not None else native_loader)
    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_report(report)
    return 0 if report.error is None else 1


if __name__ == "__main__":
    sys.exit(main())
