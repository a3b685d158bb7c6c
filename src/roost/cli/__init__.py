"""Roost CLI — serve an app, list its routes, generate a manifest.

Entry point registered as ``roost`` in ``pyproject.toml``::

    [project.scripts]
    roost = "roost.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``roost`` command."""
    parser = argparse.ArgumentParser(
        prog="roost",
        description="Roost — a minimal component runtime for web applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- roost run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- roost routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List compiled routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- roost manifest ---------------------------------------------------
    manifest_parser = subparsers.add_parser(
        "manifest", help="Write a component manifest for one or more packages"
    )
    manifest_parser.add_argument("packages", nargs="+", help="Packages to scan")
    manifest_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write to this file instead of stdout",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from roost.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from roost.cli._routes import run_routes

        run_routes(args)
    elif args.command == "manifest":
        from roost.cli._manifest import write_manifest

        write_manifest(args)
