"""Generate struct definitions from ``.msg`` message definitions.

A single ``.msg`` file can be translated with ``-i``, or whole packages of a
workspace can be translated with ``-t``; the latter asks ``colcon`` which
packages the requested types depend on.
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from dataclasses import dataclass, field
from decimal import Decimal
from itertools import dropwhile, takewhile
from pathlib import Path
from typing import Optional, Sequence, TextIO

from .parser import (
    BoundedString,
    ComplexType,
    Constant,
    Field,
    Line,
    Primitive,
    StaticArray,
    TypeName,
    Value,
    ValueKind,
    msg_spec,
)

VERSION = "0.0.1"

TARGET_BYTESTRING = "String"
TARGET_WIDE_STRING = "WString"

_PRIMITIVE_TYPES = {
    "bool": "bool",
    "byte": "u8",
    "char": "u8",
    "float32": "f32",
    "float64": "f64",
    "int8": "i8",
    "int16": "i16",
    "int32": "i32",
    "int64": "i64",
    "uint8": "u8",
    "uint16": "u16",
    "uint32": "u32",
    "uint64": "u64",
    "string": TARGET_BYTESTRING,
    "wstring": TARGET_WIDE_STRING,
}

_FILE_HEADER = (
    "// Generated code. Do not modify.\n"
    "use serde::{Serialize,Deserialize};\n"
    "#[allow(unused_imports)]\n"
    "use ros2_client::WString;\n"
    "\n"
)


def _quoted(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass
class RosPkg:
    """A package that defines message types."""

    name: str
    path: str
    types: dict[str, str] = field(default_factory=dict)
    """Message type names mapped to their definitions, sorted by name."""


def _read_msg_types(msg_dir: Path) -> dict[str, str]:
    if not msg_dir.is_dir():
        return {}
    print(f"Package path {_quoted(str(msg_dir))}")
    types: dict[str, str] = {}
    for path in msg_dir.iterdir():
        if path.suffix != ".msg":
            print(f"{_quoted(str(path))} is not .msg")
            continue
        if not path.stem:
            print(f"Weird file name {_quoted(str(path))}")
            continue
        types[path.stem] = path.read_text(encoding="utf-8")
    return dict(sorted(types.items()))


def list_packages_with_msgs(workspace_dir: str, ros2_abs_type: str) -> list[RosPkg]:
    """List the packages with messages that ``package_name/type_name`` depends on.

    Packages come in topological order, most primitive first.
    """
    package_name, sep, _type_name = ros2_abs_type.rpartition("/")
    if not sep:
        raise ValueError("Need package_name/type_name")

    print("Querying colcon")
    completed = subprocess.run(
        ["colcon", "list", "--topological-order", "--packages-up-to", package_name],
        cwd=workspace_dir,
        capture_output=True,
    )
    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace")
        raise OSError(f"Colcon failure: {stderr}\nHave you run local_setup.bash?")

    result: list[RosPkg] = []
    for raw_line in completed.stdout.splitlines():
        fields = raw_line.split()
        if len(fields) != 3:
            raise RuntimeError(f"Colcon list output: {fields!r}")
        name = fields[0].decode("utf-8", errors="replace")
        package_path = fields[1].decode("utf-8", errors="replace")
        types = _read_msg_types(Path(workspace_dir) / package_path / "msg")
        if types:
            result.append(RosPkg(name=name, path=package_path, types=types))
    print(f"Got {len(result)} packages")
    return result


def escape_keywords(ident: str) -> str:
    """Turn an identifier that is a reserved word into a raw identifier."""
    return f"r#{ident}" if ident == "type" else ident


def translate_type(type_name: TypeName) -> str:
    """Return the target-language type for a message type."""
    base_spec = type_name.base
    if isinstance(base_spec, Primitive):
        try:
            base = _PRIMITIVE_TYPES[base_spec.name]
        except KeyError:
            raise ValueError(f"Unexpected primitive type {base_spec.name}") from None
    elif isinstance(base_spec, BoundedString):
        base = TARGET_BYTESTRING  # boundedness is not represented
    elif isinstance(base_spec, ComplexType):
        prefix = f"super::{base_spec.package_name}::" if base_spec.package_name else ""
        base = prefix + base_spec.type_name
    else:
        raise TypeError(f"not a base type: {base_spec!r}")

    array_spec = type_name.array_spec
    if array_spec is None:
        return base
    if isinstance(array_spec, StaticArray):
        return f"[{base};{array_spec.size}]"
    return f"Vec<{base}>"


def _format_float(number: float) -> str:
    if number != number:
        return "NaN"
    if number in (float("inf"), float("-inf")):
        return "inf" if number > 0 else "-inf"
    text = format(Decimal(repr(number)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def translate_value(value: Value) -> str:
    """Return the source text of a constant value."""
    if value.kind is ValueKind.BOOL:
        return "true" if value.data else "false"
    if value.kind is ValueKind.FLOAT:
        return _format_float(float(value.data))
    if value.kind in (ValueKind.INT, ValueKind.UINT):
        return str(value.data)
    data = value.data
    if isinstance(data, str):
        return data
    return bytes(data).decode("utf-8")


def _write_comment_or_newline(out: TextIO, note) -> None:
    out.write(f"// {note.text}\n" if note is not None else "\n")


def print_struct_definition(out: TextIO, name: str, lines: Sequence[Line]) -> None:
    """Write constants and a struct for one message definition.

    Lines before the first field become constants and comments above the
    struct; the rest become its body.
    """

    def before_fields(line: Line) -> bool:
        return not isinstance(line[0], Field)

    for item, note in takewhile(before_fields, lines):
        if item is None:
            if note is None:
                out.write("\n")
            else:
                out.write(f"// {note.text}\n")
            continue
        assert isinstance(item, Constant)
        out.write(
            f"pub const {item.const_name} : {translate_type(item.type_name)}"
            f" = {translate_value(item.value)};"
        )
        _write_comment_or_newline(out, note)

    out.write("#[derive(Debug, Serialize, Deserialize)]\n")
    out.write(f"pub struct {name} {{\n")
    for item, note in dropwhile(before_fields, lines):
        if item is None:
            if note is None:
                out.write("\n")
            else:
                out.write(f"  // {note.text}\n")
            continue
        out.write("  ")
        if isinstance(item, Field):
            out.write(f"{escape_keywords(item.field_name)} : {translate_type(item.type_name)}, ")
        else:
            out.write(f"// skipped constant {item.const_name} in the middle of struct")
        _write_comment_or_newline(out, note)
    out.write("}\n")


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msggen", description=".msg compiler for message struct definitions"
    )
    parser.add_argument("--version", action="version", version=VERSION)
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-i", dest="input", metavar="file", help="Input .msg file name")
    source.add_argument(
        "-t",
        dest="types",
        action="append",
        metavar="package_name/type_name",
        help="ROS 2 type to be translated. Can be used multiple times.",
    )
    parser.add_argument("-o", dest="output", metavar="file/dir", help="Output path")
    parser.add_argument("-w", dest="workspace", metavar="dir", help="ROS 2 workspace path")
    return parser


def _translate_file(input_name: str, output: Optional[str]) -> None:
    type_name = Path(input_name).stem
    if not type_name:
        raise OSError("Input file did not have base name?")
    text = Path(input_name).read_text(encoding="utf-8")
    _rest, lines = msg_spec(text)
    if output is None:
        print_struct_definition(sys.stdout, type_name, lines)
    else:
        with open(output, "w", encoding="utf-8") as out_file:
            print_struct_definition(out_file, type_name, lines)


def _translate_types(types: list[str], output_dir: Optional[str], workspace: Optional[str]) -> None:
    if output_dir is None:
        raise ValueError("Output dir required")
    if workspace is None:
        raise ValueError("ROS 2 workspace dir required")

    print(f"Requested types: [{', '.join(_quoted(t) for t in types)}]")
    pkgs: list[RosPkg] = []
    for ros2_type in types:
        for pkg in list_packages_with_msgs(workspace, ros2_type):
            if pkg not in pkgs:
                pkgs.append(pkg)

    with open(output_dir + "/mod.rs", "w", encoding="utf-8") as mod_file:
        for pkg in pkgs:
            output_file_name = f"{output_dir}/{pkg.name}.rs"
            print(f"Generating to {_quoted(output_file_name)}")
            with open(output_file_name, "w", encoding="utf-8") as out_file:
                mod_file.write(f"mod {pkg.name};\n")
                out_file.write(_FILE_HEADER)
                for ros2type, type_def in pkg.types.items():
                    print(f"  type {_quoted(ros2type)}")
                    _rest, lines = msg_spec(type_def)
                    print_struct_definition(out_file, ros2type, lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the generator; return the process exit status."""
    args = _build_arg_parser().parse_args(argv)
    try:
        if args.input is not None:
            _translate_file(args.input, args.output)
        elif args.types:
            _translate_types(args.types, args.output, args.workspace)
        else:
            print("Please specify input by either -i or -t option.")
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())