# checkct

`checkct` prepares a verification workspace next to a cargo library crate.
It then builds the driver crates in that workspace and runs the `binsec`
binary analyser on each marked entry point. This checks that the code runs in
constant time with respect to secret data.

## Requirements

- Python 3.11 or later
- `cargo` on your `PATH`, with these targets installed:
  `thumbv7em-none-eabihf`, `riscv32imac-unknown-none-elf` and
  `x86_64-unknown-linux-gnu`
- `binsec` on your `PATH`. If you installed it with opam, run
  `eval $(opam env)` first.
- A `checkct_macros` cargo crate that provides the `#[checkct]` attribute
  (see "What this package does not provide" below)

## Installation

```
pip install .
```

## Commands

Every command acts on the crate in the working directory. Pass `-d/--dir PATH`
to act on another crate.

### `checkct init`

```
checkct init
checkct init --dir path/to/crate --name driver
```

This command reads the package name from the crate's `Cargo.toml` and creates
`checkct/` next to that file. The directory holds:

- `Cargo.toml`: the workspace manifest, listing the driver
- `.cargo/config.toml`: the three build targets above. On macOS on Apple
  silicon it also sets a linker line for `x86_64-unknown-linux-gnu`.
- `rust-toolchain.toml`
- `<name>/`: a driver crate with `Cargo.toml`, `src/main.rs`, `src/rng.rs`
  and `src/driver.rs`

The driver is called `driver` unless you pass `-n/--name`.

Write the code under test in `checkct/<name>/src/driver.rs`, at the line
`// USER CODE GOES HERE`. Use `PrivateRng` for secret inputs and `PublicRng`
for public ones.

### `checkct add`

```
checkct add --name other_driver
```

This command creates one more driver crate and adds it to the workspace
members. `-n/--name` is required. The command fails if the workspace already
has a driver with that name.

### `checkct run`

```
checkct run
checkct run --dir path/to/crate --timeout 60
```

The command runs `cargo build --release` in the workspace. Then, for each
driver and each build target:

1. It reads the driver's ELF binary.
2. It finds every `__checkct_entrypoint_descriptor__` symbol and resolves it
   to the function it points to.
3. It writes a script to `checkct/target/<target>/<driver>.binsec`.
4. It runs `binsec -sse -checkct` on that script.

`-t/--timeout` sets the binsec timeout in seconds. The default is 600.

The output of each binsec run is printed. The last line is the overall verdict:

- `SECURE`: every entry point was reported secure
- `INSECURE`: at least one entry point was reported insecure
- `UNKNOWN`: at least one run gave no verdict, and none was insecure

An insecure entry point does not stop the run, so every verdict still appears
in the output. Only `thumb*`, `riscv*` and `x86_64*` targets are accepted.

If a command fails, it prints `Error: ...` to standard error and exits with
status 1.

## Library use

- `checkct.workspace.init_workspace(path, name)` and
  `checkct.workspace.add_driver(path, name)` do the same as `init` and `add`.
- `checkct.runner.run_binsec(workspace_dir, timeout)` takes the `checkct/`
  directory itself and returns a `checkct.runner.Status`.
- `checkct.elf.ElfFile.parse(data)` and
  `checkct.elf.find_checkct_entrypoints(elf, binary)` expose the ELF reading
  on its own.

Problems with the workspace or the manifests raise
`checkct.manifest.CheckctError`. Malformed binaries raise
`checkct.elf.ElfError`.

## What this package does not provide

The package does not ship the `checkct_macros` crate. The generated driver
code depends on that crate for the `#[checkct]` attribute, which emits the
entry-point descriptor symbols.

Each driver's `Cargo.toml` refers to the crate by a relative path. By default
that path points to a `checkct_macros` directory inside the installed `checkct`
package. To use a crate somewhere else, set `CHECKCT_MACROS_DIR` to its
directory before you run `init` or `add`.