"""Text templates for the files that make up a checkct workspace."""

from __future__ import annotations

from collections.abc import Iterable

RUST_TOOLCHAIN = """\
[toolchain]
channel = "stable"
targets = ["thumbv7em-none-eabihf", "riscv32imac-unknown-none-elf", "x86_64-unknown-linux-gnu"]
profile = "minimal"
"""

_WORKSPACE_MANIFEST = """\
[workspace]
resolver = "2"
members = [{members}]

[profile.release]
debug = true
panic = "abort"
lto = true
"""

_DRIVER_MANIFEST = """\
[package]
name = "{name}"
version = "0.1.0"
edition = "2021"

[dependencies]
checkct_macros = {{ path = "{checkct_macros_crate_path}" }}
rand_core = "0.6"
{lib_name} = {{ path = "../.." }}
"""

_CARGO_CONFIG = """\
[build]
target = ["thumbv7em-none-eabihf", "riscv32imac-unknown-none-elf", "x86_64-unknown-linux-gnu"]

[target.x86_64-unknown-linux-gnu]
{linker}
rustflags = ["-C", "link-arg=-nostartfiles", "-C", "relocation-model=static"]
"""

_BINSEC_SCRIPT = """\
# word size: {size} bits
starting from <{entrypoint}>
load sections {sections} from file
with concrete stack pointer

{lr} := {ret}

replace <__checkct_private_rand> by
  res<8> := secret
  return res
end

replace <__checkct_public_rand> by
  res<8> := nondet
  return res
end

halt at {ret}{thumb}
"""

_DRIVER_RS = """\
use crate::rng::{CryptoRng, PrivateRng, PublicRng, RngCore};
use checkct_macros::checkct;

#[checkct]
pub fn checkct() {
    // USER CODE GOES HERE
}
"""

_MAIN_RS = """\
//----- AUTOGENERATED BY CHECKCT: DO NOT MODIFY -----
//
#![no_std]
#![no_main]

mod driver;
mod rng;

#[no_mangle]
pub extern "C" fn _start() -> ! {
    panic!()
}

#[panic_handler]
fn panic(_info: &core::panic::PanicInfo) -> ! {
    loop {}
}
"""


def _rng_source(kind: str, address: str) -> str:
    name = f"{kind.capitalize()}Rng"
    func = f"__checkct_{kind}_rand"
    return f"""\
pub struct {name};

impl {name} {{
    pub const fn new() -> Self {{
        Self
    }}
}}

impl RngCore for {name} {{
    fn next_u32(&mut self) -> u32 {{
        ({func}() as u32) << 24
            | ({func}() as u32) << 16
            | ({func}() as u32) << 8
            | ({func}() as u32)
    }}

    fn next_u64(&mut self) -> u64 {{
        (self.next_u32() as u64) << 32 | (self.next_u32() as u64)
    }}

    fn fill_bytes(&mut self, dest: &mut [u8]) {{
        for d in dest {{
            *d = {func}();
        }}
    }}

    fn try_fill_bytes(&mut self, dest: &mut [u8]) -> Result<(), rand_core::Error> {{
        self.fill_bytes(dest);
        Ok(())
    }}
}}

impl CryptoRng for {name} {{}}
"""


def _rand_function(kind: str, address: str) -> str:
    return f"""\
#[no_mangle]
#[inline(never)]
pub fn __checkct_{kind}_rand() -> u8 {{
    unsafe {{ core::ptr::read_volatile({address} as *const u8) }}
}}
"""


_RNG_RS = (
    "//----- AUTOGENERATED BY CHECKCT: DO NOT MODIFY -----\n//\n"
    + _rand_function("private", "0xcafe")
    + "\n"
    + _rand_function("public", "0xf00d")
    + "\npub use rand_core::{CryptoRng, RngCore};\n\n"
    + _rng_source("private", "0xcafe")
    + "\n"
    + _rng_source("public", "0xf00d")
)


def render_workspace_manifest(members: Iterable[str]) -> str:
    """Render the workspace Cargo.toml listing the given driver crates."""
    quoted = ", ".join(f'"{member}"' for member in members)
    return _WORKSPACE_MANIFEST.format(members=quoted)


def render_driver_manifest(name: str, checkct_macros_crate_path: str, lib_name: str) -> str:
    """Render the Cargo.toml of a driver crate testing ``lib_name``."""
    return _DRIVER_MANIFEST.format(
        name=name,
        checkct_macros_crate_path=checkct_macros_crate_path,
        lib_name=lib_name,
    )


def render_cargo_config(linker: str) -> str:
    """Render .cargo/config.toml; ``linker`` is a full TOML line or empty."""
    return _CARGO_CONFIG.format(linker=linker)


def render_binsec_script(
    sections: str, entrypoint: str, lr: str, ret: str, size: int, thumb: str
) -> str:
    """Render the symbolic-execution script for one entrypoint."""
    return _BINSEC_SCRIPT.format(
        sections=sections,
        entrypoint=entrypoint,
        lr=lr,
        ret=ret,
        size=size,
        thumb=thumb,
    )


def driver_sources() -> dict[str, str]:
    """Return the source files of a fresh driver crate, keyed by file name."""
    return {"rng.rs": _RNG_RS, "main.rs": _MAIN_RS, "driver.rs": _DRIVER_RS}