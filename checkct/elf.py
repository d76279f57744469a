"""Minimal ELF reader for locating checkct entrypoints."""

from __future__ import annotations

import struct
from dataclasses import dataclass

DESCRIPTOR_MARKER = "__checkct_entrypoint_descriptor__"

_ELF_MAGIC = b"\x7fELF"
_SHT_SYMTAB = 2
_STT_FUNC = 2


class ElfError(Exception):
    """Raised for malformed or unsupported ELF data."""


@dataclass(frozen=True)
class Symbol:
    name: str | None
    value: int
    size: int
    info: int
    shndx: int

    @property
    def is_function(self) -> bool:
        return self.info & 0xF == _STT_FUNC


@dataclass(frozen=True)
class Section:
    name: str | None
    type: int
    addr: int
    offset: int
    size: int
    link: int


def _string_at(table: bytes, offset: int) -> str | None:
    if offset >= len(table):
        return None
    end = table.find(b"\0", offset)
    if end < 0:
        end = len(table)
    return table[offset:end].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ElfFile:
    is_64: bool
    little_endian: bool
    sections: list[Section]
    symbols: list[Symbol]

    @classmethod
    def parse(cls, data: bytes) -> ElfFile:
        """Parse the header, section headers and symbol table of an ELF image."""
        if len(data) < 16 or data[:4] != _ELF_MAGIC:
            raise ElfError("Object format not supported: not an ELF file")
        elf_class, elf_data = data[4], data[5]
        if elf_class not in (1, 2) or elf_data not in (1, 2):
            raise ElfError("Unsupported ELF class or data encoding")
        is_64 = elf_class == 2
        endian = "<" if elf_data == 1 else ">"
        try:
            return cls._parse(data, is_64, endian)
        except struct.error as exc:
            raise ElfError(f"Truncated ELF data: {exc}") from exc

    @classmethod
    def _parse(cls, data: bytes, is_64: bool, endian: str) -> ElfFile:
        if is_64:
            header = struct.unpack_from(endian + "HHIQQQIHHHHHH", data, 16)
            sh_format, sym_format = endian + "IIQQQQIIQQ", endian + "IBBHQQ"
        else:
            header = struct.unpack_from(endian + "HHIIIIIHHHHHH", data, 16)
            sh_format, sym_format = endian + "IIIIIIIIII", endian + "IIIBBH"
        shoff, shentsize, shnum, shstrndx = header[5], header[10], header[11], header[12]

        raw_sections = [
            struct.unpack_from(sh_format, data, shoff + index * shentsize)
            for index in range(shnum)
        ]

        def contents(raw: tuple) -> bytes:
            offset, size = raw[4], raw[5]
            if offset + size > len(data):
                raise ElfError("Section extends past the end of the file")
            return data[offset : offset + size]

        shstrtab = contents(raw_sections[shstrndx]) if shstrndx < len(raw_sections) else b""
        sections = [
            Section(
                name=_string_at(shstrtab, raw[0]),
                type=raw[1],
                addr=raw[3],
                offset=raw[4],
                size=raw[5],
                link=raw[6],
            )
            for raw in raw_sections
        ]

        symbols: list[Symbol] = []
        symtab_index = next(
            (i for i, section in enumerate(sections) if section.type == _SHT_SYMTAB), None
        )
        if symtab_index is not None:
            symtab_raw = raw_sections[symtab_index]
            link = sections[symtab_index].link
            strtab = contents(raw_sections[link]) if link < len(raw_sections) else b""
            table = contents(symtab_raw)
            entry_size = struct.calcsize(sym_format)
            for (fields,) in zip(struct.iter_unpack(sym_format, table[: len(table) // entry_size * entry_size])):
                if is_64:
                    name, info, _other, shndx, value, size = fields
                else:
                    name, value, size, info, _other, shndx = fields
                symbols.append(Symbol(_string_at(strtab, name), value, size, info, shndx))

        return cls(is_64=is_64, little_endian=endian == "<", sections=sections, symbols=symbols)

    def section_names(self) -> list[str]:
        """Names of all section headers, in header order."""
        return [section.name or "" for section in self.sections]


def find_checkct_entrypoints(elf: ElfFile, binary: bytes) -> list[str]:
    """Resolve each entrypoint descriptor to the name of the function it points to."""
    byteorder = "little" if elf.little_endian else "big"
    entrypoints: list[str] = []
    for symbol in elf.symbols:
        if symbol.name is None or DESCRIPTOR_MARKER not in symbol.name:
            continue
        if not 0 <= symbol.shndx < len(elf.sections):
            raise ElfError(f"Descriptor {symbol.name} has no valid section")
        section = elf.sections[symbol.shndx]
        start = symbol.value - section.addr + section.offset
        if symbol.size not in (4, 8):
            raise ElfError(f"Unsupported descriptor size {symbol.size} for {symbol.name}")
        raw = binary[start : start + symbol.size]
        if len(raw) != symbol.size:
            raise ElfError(f"Descriptor {symbol.name} lies outside the binary")
        entry_addr = int.from_bytes(raw, byteorder)

        target = next(
            (s for s in elf.symbols if s.value == entry_addr and s.is_function), None
        )
        if target is None or target.name is None:
            raise ElfError(f"No function found at {entry_addr:#x} for {symbol.name}")
        entrypoints.append(target.name)
    return entrypoints