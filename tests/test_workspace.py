from unittest import mock

import pytest

from checkct.manifest import CheckctError, get_lib_name, get_workspace_members
from checkct.workspace import add_driver, init_workspace


@pytest.fixture
def library(tmp_path):
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "my-lib"\nversion = "0.1.0"\n')
    return tmp_path


def test_init_creates_workspace(library):
    init_workspace(library, "driver")
    workspace = library / "checkct"
    assert get_workspace_members(workspace) == ["driver"]
    assert (workspace / "rust-toolchain.toml").is_file()
    assert (workspace / ".cargo" / "config.toml").is_file()
    driver_src = workspace / "driver" / "src"
    assert sorted(p.name for p in driver_src.iterdir()) == ["driver.rs", "main.rs", "rng.rs"]
    assert "// USER CODE GOES HERE" in (driver_src / "driver.rs").read_text()


def test_init_driver_manifest_names_library(library):
    init_workspace(library, "mydriver")
    driver_dir = library / "checkct" / "mydriver"
    assert get_lib_name(driver_dir) == "mydriver"
    assert "my-lib" in (driver_dir / "Cargo.toml").read_text()


def test_init_prints_library_name(library, capsys):
    init_workspace(library, "driver")
    assert "found library name: my-lib" in capsys.readouterr().out


def test_init_on_apple_silicon_sets_linker(library):
    with mock.patch("checkct.workspace.platform.system", return_value="Darwin"), \
            mock.patch("checkct.workspace.platform.machine", return_value="arm64"):
        init_workspace(library, "driver")
    config = (library / "checkct" / ".cargo" / "config.toml").read_text()
    assert 'linker = "x86_64-unknown-linux-gnu-gcc"' in config


def test_init_elsewhere_leaves_linker_out(library):
    with mock.patch("checkct.workspace.platform.system", return_value="Linux"), \
            mock.patch("checkct.workspace.platform.machine", return_value="x86_64"):
        init_workspace(library, "driver")
    config = (library / "checkct" / ".cargo" / "config.toml").read_text()
    assert "linker =" not in config


def test_init_without_manifest_raises(tmp_path):
    with pytest.raises(CheckctError):
        init_workspace(tmp_path, "driver")
    assert not (tmp_path / "checkct").exists()


def test_add_appends_member(library):
    init_workspace(library, "driver")
    add_driver(library, "second")
    workspace = library / "checkct"
    assert get_workspace_members(workspace) == ["driver", "second"]
    assert (workspace / "second" / "src" / "driver.rs").is_file()


def test_add_duplicate_raises(library):
    init_workspace(library, "driver")
    with pytest.raises(CheckctError, match="already contains driver driver"):
        add_driver(library, "driver")
    assert get_workspace_members(library / "checkct") == ["driver"]


def test_add_without_workspace_raises(library):
    with pytest.raises(CheckctError):
        add_driver(library, "driver")