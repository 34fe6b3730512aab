#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

from blocksharp.compiler import CSharpGenerator, find_scope_violations
from blocksharp.document import export_script, load_document
from blocksharp.errors import BlockSharpError


DEFAULT_OUTPUT_DIR = "build"


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Compile a saved block-program document (JSON) into a Unity "
            "MonoBehaviour C# script."
        )
    )
    parser.add_argument(
        "document",
        help="Path to the saved document (version 1 JSON).",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        help="Directory where <ClassName>.cs will be written.",
    )
    parser.add_argument(
        "--class-name",
        default=None,
        help="Override the class name stored in the document.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the generated script instead of writing a file.",
    )
    return parser.parse_args()


def _print_scope_report(source: str) -> None:
    violations = find_scope_violations(source)
    if violations:
        lines = ", ".join(str(line_no) for line_no in violations)
        print(f"Commented out {len(violations)} out-of-scope statement(s) at line(s): {lines}")


def main() -> None:
    args = _parse_args()
    document_path = Path(args.document).resolve()

    try:
        if args.stdout:
            workspace, registry = load_document(document_path)
            if args.class_name:
                registry.set_class_name(args.class_name)
            print(CSharpGenerator().generate(workspace, registry), end="")
            return

        script_path = export_script(
            document_path,
            Path(args.output).resolve(),
            class_name=args.class_name,
        )
    except (BlockSharpError, OSError) as exc:
        raise SystemExit(f"error: {exc}") from exc

    print(f"Generated C# script: {script_path}")
    _print_scope_report(script_path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    main()
