import tomllib
from pathlib import Path

import pytest

from checkct.manifest import (
    CheckctError,
    create_driver,
    get_lib_name,
    get_workspace_members,
)
from checkct.templates import driver_sources


def _write(path: Path, text: str) -> None:
    path.mkdir(parents=True, exist_ok=True)
    (path / "Cargo.toml").write_text(text)


def test_lib_name_keeps_dashes(tmp_path):
    _write(tmp_path, '[package]\nname = "my-lib"\nversion = "0.1.0"\n')
    assert get_lib_name(tmp_path) == "my-lib"


def test_lib_name_missing_manifest(tmp_path):
    with pytest.raises(CheckctError, match="Failed to find the cargo manifest"):
        get_lib_name(tmp_path)


def test_lib_name_without_package(tmp_path):
    _write(tmp_path, '[workspace]\nmembers = ["a"]\n')
    with pytest.raises(CheckctError, match="package entry"):
        get_lib_name(tmp_path)


def test_lib_name_invalid_toml(tmp_path):
    _write(tmp_path, "[package\nname = ")
    with pytest.raises(CheckctError):
        get_lib_name(tmp_path)


def test_workspace_members(tmp_path):
    _write(tmp_path, '[workspace]\nmembers = ["driver", "second"]\n')
    assert get_workspace_members(tmp_path) == ["driver", "second"]


def test_workspace_without_members_is_empty(tmp_path):
    _write(tmp_path, "[workspace]\n")
    assert get_workspace_members(tmp_path) == []


def test_workspace_missing_entry(tmp_path):
    _write(tmp_path, '[package]\nname = "x"\n')
    with pytest.raises(CheckctError, match=r"\[workspace\] entry"):
        get_workspace_members(tmp_path)


def test_create_driver_writes_sources(tmp_path, monkeypatch):
    macros = tmp_path / "macros"
    macros.mkdir()
    monkeypatch.setenv("CHECKCT_MACROS_DIR", str(macros))
    workspace = tmp_path / "lib" / "checkct"
    workspace.mkdir(parents=True)

    create_driver(workspace, "my-lib", "drv")

    src = workspace / "drv" / "src"
    for file_name, content in driver_sources().items():
        assert (src / file_name).read_text() == content


def test_create_driver_manifest_points_at_macros(tmp_path, monkeypatch):
    macros = tmp_path / "macros"
    macros.mkdir()
    monkeypatch.setenv("CHECKCT_MACROS_DIR", str(macros))
    workspace = tmp_path / "lib" / "checkct"
    workspace.mkdir(parents=True)

    create_driver(workspace, "my-lib", "drv")

    driver_dir = workspace / "drv"
    parsed = tomllib.loads((driver_dir / "Cargo.toml").read_text())
    assert parsed["package"]["name"] == "drv"
    assert parsed["dependencies"]["my-lib"]["path"] == "../.."
    rel = parsed["dependencies"]["checkct_macros"]["path"]
    assert not Path(rel).is_absolute()
    assert (driver_dir.resolve() / rel).resolve() == macros.resolve()