"""``roost manifest`` — generate a component manifest at build time.

Scans the given packages for marked classes and writes the descriptor
list in the manifest format ``ManifestScanner`` reads, so production
startup can skip the package walk.
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from roost.discovery import PackageScanner, ReflectionFlags, dump_manifest
from roost.errors import DiscoveryError

# Generated entries request full constructor and method access.
MANIFEST_FLAGS = ReflectionFlags(all_declared_constructors=True, all_declared_methods=True)


def write_manifest(args: argparse.Namespace) -> None:
    try:
        descriptors = PackageScanner(*args.packages).scan()
    except DiscoveryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    text = dump_manifest(replace(d, flags=MANIFEST_FLAGS) for d in descriptors)
    if args.output is None:
        print(text)
        return

    Path(args.output).write_text(text + "\n", encoding="utf-8")
    print(f"Wrote {len(descriptors)} component(s) to {args.output}", file=sys.stderr)
