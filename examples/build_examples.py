#!/usr/bin/env python3
from __future__ import annotations

import argparse
import importlib.util
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from blocksharp.document import export_script


EXAMPLES_DIR = Path(__file__).resolve().parent / "tiny"


def _load_example(path: Path):
    spec = importlib.util.spec_from_file_location(path.stem, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Save every tiny example as a document and compile it to a "
            "Unity C# script."
        )
    )
    parser.add_argument(
        "--output",
        default=str(ROOT / "build" / "examples"),
        help="Directory where documents (.json) and scripts (.cs) are written.",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    output_dir = Path(args.output).resolve()

    for path in sorted(EXAMPLES_DIR.glob("*.py")):
        session = _load_example(path).build_session()
        document = session.save(output_dir / f"{path.stem}.json")
        script = export_script(document, output_dir)
        print(f"{path.name}: {document.name} -> {script.name}")


if __name__ == "__main__":
    main()
