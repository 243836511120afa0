"""Record layout analysis CLI command."""

from __future__ import annotations

import importlib.util
import inspect
import sys
from pathlib import Path

from ..models.base import Record
from ..utils.sizing import field_layout

_MODULE_NAME = "recblock_user_module"
_WIDTH = 60


def load_record_types(file_path: Path) -> list[type[Record]]:
    """Import a Python file and return the Record subclasses it defines.

    Raises:
        ValueError: If the file cannot be loaded as a module
    """
    spec = importlib.util.spec_from_file_location(_MODULE_NAME, file_path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Could not load module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[_MODULE_NAME] = module
    spec.loader.exec_module(module)

    # Only classes defined in this file, not imported ones
    return [
        obj
        for _name, obj in inspect.getmembers(module, inspect.isclass)
        if obj is not Record and issubclass(obj, Record) and obj.__module__ == _MODULE_NAME
    ]


def analyze_file(file_path: Path) -> None:
    """Print the layout of every Record subclass in a Python file.

    Args:
        file_path: Path to Python file containing record definitions
    """
    record_types = load_record_types(file_path)
    if not record_types:
        print(f"No Record classes found in {file_path}")
        return

    print(f"{len(record_types)} record type{'s' if len(record_types) != 1 else ''} loaded.")
    print("Offsets and widths are in bytes; '?' marks a value known only after decoding.")
    print()

    for record_type in record_types:
        analyze_record_type(record_type)


def analyze_record_type(record_type: type[Record]) -> None:
    """Print one record type's field-by-field layout."""
    schema = record_type.__record_schema__
    print(f"{'=' * 10} {record_type.__name__} {'=' * 10}")

    if schema.fixed_width is not None:
        print(f"Fixed size: {schema.fixed_width} bytes")
    else:
        print("Variable size")
    if record_type.record_max_bytes is not None:
        print(f"Allowed maximum size: {record_type.record_max_bytes} bytes")
    print()

    for i, row in enumerate(field_layout(record_type), 1):
        offset = "?" if row.offset is None else str(row.offset)
        width = "?" if row.width is None else str(row.width)
        field_desc = f"{i}. {row.name} @ {offset}"
        dots = "." * max(1, _WIDTH - len(field_desc) - len(width))
        print(f"    {field_desc}{dots}{width}  {row.description}")

    print()
