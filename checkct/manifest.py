"""Reading cargo manifests and creating driver crates."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from checkct.templates import driver_sources, render_driver_manifest

MACROS_DIR_ENV = "CHECKCT_MACROS_DIR"


class CheckctError(Exception):
    """Raised when a workspace or manifest is not in the expected shape."""


def _load_manifest(directory: Path) -> dict[str, Any]:
    manifest_path = Path(directory) / "Cargo.toml"
    try:
        with manifest_path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise CheckctError(f"Failed to find the cargo manifest at: {directory}") from exc


def get_lib_name(path: Path) -> str:
    """Return the package name of the crate at ``path``, dashes preserved."""
    manifest = _load_manifest(path)
    package = manifest.get("package")
    if not isinstance(package, dict):
        raise CheckctError(f"Failed to find package entry in the cargo manifest at {path}")
    name = package.get("name")
    if not isinstance(name, str):
        raise CheckctError(f"Failed to find the cargo manifest at: {path}")
    return name


def get_workspace_members(workspace_dir: Path) -> list[str]:
    """Return the members of the cargo workspace at ``workspace_dir``."""
    manifest = _load_manifest(workspace_dir)
    workspace = manifest.get("workspace")
    if not isinstance(workspace, dict):
        raise CheckctError(
            f"Failed to find [workspace] entry in the cargo manifest at {workspace_dir}"
        )
    members = workspace.get("members", [])
    if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
        raise CheckctError(f"Failed to find the cargo manifest at: {workspace_dir}")
    return list(members)


def _macros_crate_dir() -> Path:
    configured = os.environ.get(MACROS_DIR_ENV)
    base = Path(configured) if configured else Path(__file__).parent / "checkct_macros"
    return base.resolve()


def create_driver(workspace_dir: Path, lib_name: str, name: str) -> None:
    """Create the driver crate ``name`` in the workspace, testing ``lib_name``."""
    driver_path = Path(workspace_dir) / name
    src_dir = driver_path / "src"
    src_dir.mkdir(parents=True, exist_ok=True)

    macros_path = os.path.relpath(_macros_crate_dir(), driver_path.resolve())

    (driver_path / "Cargo.toml").write_text(
        render_driver_manifest(name, Path(macros_path).as_posix(), lib_name)
    )
    for file_name, content in driver_sources().items():
        (src_dir / file_name).write_text(content)