"""
Command-line interface for the Statement Exporter.

Usage:
    statement-exporter export [--workbook=<path>]
    statement-exporter distribute [--workbook=<path>] [--source-folder=<dir>]
    statement-exporter run [--workbook=<path>] [--source-folder=<dir>]
    statement-exporter show-config [--workbook=<path>]
    statement-exporter serve [--host=<host>] [--port=<port>]

Examples:
    statement-exporter export --workbook="Client Pricing.xlsm"
    statement-exporter run --workbook=control.xlsx --source-folder=/shared/outbox
    statement-exporter serve --port=8000
"""

from __future__ import annotations

import argparse
import logging
import sys


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Client statement export and distribution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_workbook_args(sub):
        sub.add_argument("--workbook", help="Control workbook (defaults to settings.yaml)")
        sub.add_argument("--config", help="Path to config directory")

    export_parser = subparsers.add_parser(
        "export", help="Filter data sheets into per-client CSV files"
    )
    add_workbook_args(export_parser)

    distribute_parser = subparsers.add_parser(
        "distribute", help="Copy dated client files to their destination folders"
    )
    add_workbook_args(distribute_parser)
    distribute_parser.add_argument("--source-folder", help="Override the master sheet source folder")

    run_parser = subparsers.add_parser("run", help="Export, then distribute")
    add_workbook_args(run_parser)
    run_parser.add_argument("--source-folder", help="Override the master sheet source folder")

    show_parser = subparsers.add_parser(
        "show-config", help="Show settings and configuration tables"
    )
    add_workbook_args(show_parser)

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    serve_parser.add_argument("--config", help="Path to config directory")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "export":
        cmd_run(args, ("export",))
    elif args.command == "distribute":
        cmd_run(args, ("distribute",))
    elif args.command == "run":
        cmd_run(args, ("export", "distribute"))
    elif args.command == "show-config":
        cmd_show_config(args)
    elif args.command == "serve":
        cmd_serve(args)


def _open_workbook(args):
    from .core.config_loader import ConfigLoader
    from .core.errors import WorkbookNotFoundError
    from .io.tabular_store import WorkbookStore

    config_loader = ConfigLoader(args.config)
    try:
        workbook = config_loader.resolve_workbook(args.workbook)
        store = WorkbookStore(workbook)
        store.table_names()
    except (ValueError, WorkbookNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    return config_loader, store, workbook


def cmd_run(args, stages: tuple[str, ...]):
    """Run one or both stages."""
    from .core.errors import DateMissingError, PipelineError
    from .core.notifications import ConsoleNotificationSink
    from .core.pipeline_engine import PipelineEngine

    config_loader, store, workbook = _open_workbook(args)
    engine = PipelineEngine(config_loader, store, sink=ConsoleNotificationSink())

    print(f"Workbook: {workbook}")
    print("-" * 60)

    try:
        result = engine.run(stages, source_folder=getattr(args, "source_folder", None))
    except DateMissingError:
        print("-" * 60)
        print("Run aborted: no valid run date")
        sys.exit(1)
    except PipelineError as e:
        print("-" * 60)
        print(f"Run aborted: {e.message}")
        sys.exit(1)

    print("-" * 60)
    print(f"Run date: {result.run_date.display}")
    if result.export is not None:
        print(
            f"Exported: {result.export.exported_count} "
            f"(skipped {result.export.skipped_count})"
        )
    if result.distribution is not None:
        print(
            f"Distributed: {result.distribution.copied_count} "
            f"(failed {result.distribution.failed_count})"
        )
    print("Done!")


def cmd_show_config(args):
    """Show settings and configuration tables."""
    from .core.errors import DataSourceNotFoundError, DateMissingError

    config_loader, store, workbook = _open_workbook(args)
    settings = config_loader.settings

    print(f"Workbook: {workbook}")
    print(f"Sheets: {', '.join(store.table_names())}")
    print("-" * 60)

    try:
        run_date = config_loader.load_run_date(store)
        print(f"Run date: {run_date.value.isoformat()} ({run_date.compact})")
    except DateMissingError as e:
        print(f"✗ {e.message}")

    export_entries = config_loader.load_export_config(store)
    print(f"\nExport entries ({len(export_entries)}) from '{settings.export_config.sheet}':")
    for entry in export_entries:
        status = "✓" if store.has_table(entry.data_source_name) else "✗"
        print(f"  {status} {entry.client_name}")
        print(f"      Data sheet: {entry.data_source_name}")
        print(f"      Output: {entry.output_folder}<date>_{entry.output_base_name}{settings.output.export_extension}")

    distribution_entries = config_loader.load_distribution_config(store)
    print(
        f"\nDistribution entries ({len(distribution_entries)}) "
        f"from '{settings.distribution_config.sheet}':"
    )
    try:
        print(f"  Source folder: {config_loader.load_source_folder(store)}")
    except DataSourceNotFoundError as e:
        print(f"  ✗ {e.message}")
    for entry in distribution_entries:
        flag = "YES" if entry.should_process else "NO"
        print(f"  [{flag}] {entry.client_name} -> {entry.destination_folder}")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    from .api.main import create_app

    app = create_app(args.config)
    print(f"Starting server on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
