"""Building the drivers and running binsec's constant-time analysis on them."""

from __future__ import annotations

import enum
import shutil
import subprocess
import tomllib
from dataclasses import dataclass
from pathlib import Path

from checkct.elf import ElfFile, find_checkct_entrypoints
from checkct.manifest import CheckctError, get_workspace_members
from checkct.templates import render_binsec_script

EXCLUDED_SECTIONS = frozenset({".note.gnu.build-id", ".note.checkct"})
INSECURE_MARKER = "[checkct:result] Program status is : insecure"
SECURE_MARKER = "[checkct:result] Program status is : secure"


class Status(enum.Enum):
    """Verdict of the analysis, for one entrypoint or for the whole run."""

    SECURE = "SECURE"
    INSECURE = "INSECURE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class Abi:
    """How return addresses are set up on a given architecture."""

    lr: str
    ret: str
    thumb: str
    size: int


def abi_for_target(target: str) -> Abi:
    """Return the calling-convention details for a target triple."""
    arch = target.split("-", 1)[0]
    if arch.startswith("thumb"):
        return Abi(lr="lr", ret="0x8badf00d ^ 1", thumb=" ^1", size=32)
    if arch.startswith("riscv"):
        return Abi(lr="ra", ret="0x8badf00d", thumb="", size=32)
    if arch.startswith("x86_64"):
        return Abi(lr="@[rsp, 8]", ret="0xffffffff8badf00d", thumb="", size=64)
    raise CheckctError(f"unexpected target: {target}")


def read_targets(workspace_dir: Path) -> list[str]:
    """Read the build targets listed in the workspace's .cargo/config.toml."""
    config_path = Path(workspace_dir) / ".cargo" / "config.toml"
    try:
        text = config_path.read_text()
    except OSError as exc:
        raise CheckctError(f"Failed to read the config manifest in: {config_path}") from exc
    try:
        config = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise CheckctError(f"Failed to parse the config manifest in: {config_path}") from exc

    if "build" not in config:
        raise CheckctError(
            f"Failed to find the [build] entry of the config manifest in: {config_path}"
        )
    build = config["build"]
    if not isinstance(build, dict):
        raise CheckctError(
            f"[build] entry of the config manifest in: {config_path} is not a table"
        )
    if "target" not in build:
        raise CheckctError(
            f"Failed to find the [build.target] entry of the config manifest in: {config_path}"
        )
    targets = build["target"]
    if not isinstance(targets, list):
        raise CheckctError(f"[build.target] in: {config_path} is not an array")
    if not all(isinstance(target, str) for target in targets):
        raise CheckctError(f"[build.target] in: {config_path} holds a non-string entry")
    return list(targets)


def script_sections(elf: ElfFile) -> str:
    """Comma-separated names of the sections binsec should load."""
    return ", ".join(
        name for name in elf.section_names() if name and name not in EXCLUDED_SECTIONS
    )


def parse_binsec_output(stdout: str) -> Status:
    """Extract the verdict from binsec's standard output."""
    if INSECURE_MARKER in stdout:
        return Status.INSECURE
    if SECURE_MARKER in stdout:
        return Status.SECURE
    return Status.UNKNOWN


def combine_status(overall: Status, driver_status: Status) -> Status:
    """Fold one entrypoint's verdict into the overall verdict."""
    if driver_status is Status.INSECURE:
        return Status.INSECURE
    if driver_status is Status.UNKNOWN and overall is Status.SECURE:
        return Status.UNKNOWN
    return overall


def _lossy(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _build_drivers(workspace_dir: Path) -> None:
    if not workspace_dir.is_dir():
        raise CheckctError(f"Failed to set current directory to {workspace_dir}")
    cargo = shutil.which("cargo")
    if cargo is None:
        raise CheckctError("Failed to find cargo")
    try:
        output = subprocess.run(
            [cargo, "build", "--release"], cwd=workspace_dir, capture_output=True
        )
    except OSError as exc:
        raise CheckctError("Failed to build drivers") from exc
    if output.returncode != 0:
        raise CheckctError(
            "Error while building drivers:\n"
            f"stdout: {_lossy(output.stdout)}\nstderr: {_lossy(output.stderr)}"
        )


def _check_entrypoint(
    script_path: Path, binary_path: Path, script: str, timeout: int
) -> Status:
    script_path.write_text(script)
    binsec = shutil.which("binsec")
    if binsec is None:
        raise CheckctError(
            "Failed to find binsec - you might need to run `eval $(opam env)` first"
        )
    command = [
        binsec,
        "-sse",
        "-checkct",
        "-sse-depth",
        "1000000000",
        "-sse-jump-enum",
        "64",
        "-sse-script",
        str(script_path),
        "-sse-timeout",
        str(timeout),
        "-arm-supported-modes",
        "thumb",
        str(binary_path),
    ]
    print(f"  Running: {' '.join(command)}")
    try:
        output = subprocess.run(command, capture_output=True)
    except OSError as exc:
        raise CheckctError("Failed to run binsec") from exc

    stdout = _lossy(output.stdout)
    if output.returncode != 0:
        raise CheckctError(
            f"Error while running binsec:\nstdout: {stdout}\nstderr: {_lossy(output.stderr)}"
        )
    status = parse_binsec_output(stdout)
    if status is Status.UNKNOWN:
        print(f"UNEXPECTED:\nstderr: {_lossy(output.stderr)}")
    print(f"stdout: {stdout}")
    return status


def run_binsec(workspace_dir: Path, timeout: int) -> Status:
    """Build every driver of the workspace and analyse each of its entrypoints."""
    workspace_dir = Path(workspace_dir)
    _build_drivers(workspace_dir)

    members = get_workspace_members(workspace_dir)
    if not members:
        raise CheckctError("Error: found empty [workspace.members] key - no drivers to build.")

    overall = Status.SECURE
    for driver in members:
        print(f"Driver {driver}:")
        for target in read_targets(workspace_dir):
            print(f"  target: {target}")
            abi = abi_for_target(target)
            target_dir = workspace_dir / "target" / target
            binary_path = target_dir / "release" / driver
            binary = binary_path.read_bytes()
            elf = ElfFile.parse(binary)
            sections = script_sections(elf)

            for entrypoint in find_checkct_entrypoints(elf, binary):
                script = render_binsec_script(
                    sections=sections,
                    entrypoint=entrypoint,
                    lr=abi.lr,
                    ret=abi.ret,
                    size=abi.size,
                    thumb=abi.thumb,
                )
                status = _check_entrypoint(
                    target_dir / f"{driver}.binsec", binary_path, script, int(timeout)
                )
                # Keep going after a failure so every driver's verdict reaches the log.
                overall = combine_status(overall, status)
    return overall