"""Creating a checkct workspace and adding drivers to it."""

from __future__ import annotations

import platform
from pathlib import Path

from checkct.manifest import (
    CheckctError,
    create_driver,
    get_lib_name,
    get_workspace_members,
)
from checkct.templates import (
    RUST_TOOLCHAIN,
    render_cargo_config,
    render_workspace_manifest,
)

WORKSPACE_DIR_NAME = "checkct"


def _linker_line() -> str:
    if platform.system() == "Darwin" and platform.machine() in ("arm64", "aarch64"):
        return 'linker = "x86_64-unknown-linux-gnu-gcc"'
    return ""


def init_workspace(path: Path, name: str) -> None:
    """Create the checkct workspace next to the crate at ``path``, with one driver."""
    path = Path(path)
    lib_name = get_lib_name(path)
    print(f"found library name: {lib_name}")

    workspace_dir = path / WORKSPACE_DIR_NAME
    (workspace_dir / ".cargo").mkdir(parents=True, exist_ok=True)

    (workspace_dir / "rust-toolchain.toml").write_text(RUST_TOOLCHAIN)
    (workspace_dir / ".cargo" / "config.toml").write_text(render_cargo_config(_linker_line()))
    (workspace_dir / "Cargo.toml").write_text(render_workspace_manifest([name]))

    create_driver(workspace_dir, lib_name, name)


def add_driver(path: Path, name: str) -> None:
    """Add a new driver crate ``name`` to the existing checkct workspace."""
    path = Path(path)
    workspace_dir = path / WORKSPACE_DIR_NAME

    lib_name = get_lib_name(path)
    print(f"found library name: {lib_name}")

    members = get_workspace_members(workspace_dir)
    if name in members:
        raise CheckctError(f"Error: the checkct workspace already contains driver {name}")

    create_driver(workspace_dir, lib_name, name)

    (workspace_dir / "Cargo.toml").write_text(render_workspace_manifest([*members, name]))