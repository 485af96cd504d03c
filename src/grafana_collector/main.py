#!/usr/bin/env python3
"""Main CLI entrypoint for grafana-collector."""

import argparse
import logging
import os
import sys
from importlib.metadata import version
from pathlib import Path

from grafana_collector.core.artifact_extractor import ArtifactExtractor
from grafana_collector.core.client import DEFAULT_TIMEOUT, GrafanaClient
from grafana_collector.core.collector import CollectionResult, DashboardCollector
from grafana_collector.core.config_manager import GrafanaConfigManager, resolve_grafana_settings
from grafana_collector.core.content_creators import ScriptContentCreator, StaticContentCreator
from grafana_collector.core.errors import CollectorError
from grafana_collector.core.script_engine import ClasspathSet, JsonnetScriptEngine
from grafana_collector.core.uploader import DashboardUploader, UploadResult

# Read version from package metadata (defined in pyproject.toml)
try:
    __version__ = version("grafana-collector")
except Exception:
    __version__ = "unknown"

DEFAULT_DASHBOARD_DIR = Path("grafana")
DEFAULT_ARTIFACT_DIR = Path("build") / "grafana"
DEFAULT_OUTPUT_DIR = Path("build") / "grafana-dashboards"


def fail(message: str):
    print(f"Error: {message}")
    sys.exit(1)


# ============================================================================
# Config Commands
# ============================================================================


def config_add(args):
    """Add or update a context in the config file."""
    if not args.token and not (args.user and args.password):
        fail("either --token or --user/--password is required")

    manager = GrafanaConfigManager()
    manager.add_context(
        args.name, args.server, token=args.token, user=args.user, password=args.password, org_id=args.org_id
    )

    if args.use_context or manager.get_current_context() is None:
        manager.use_context(args.name)

    print(f"Context '{args.name}' added to {manager.config_path}")


def config_list(args):
    """List all contexts in the config file."""
    manager = GrafanaConfigManager()
    contexts = manager.list_contexts()
    current_context = manager.get_current_context()

    if not contexts:
        print("No contexts configured")
        return

    config = manager.load()
    print("Available contexts:")
    for name in contexts:
        marker = "*" if name == current_context else " "
        server = (config["contexts"][name] or {}).get("grafana", {}).get("server", "")
        print(f"{marker} {name:<20} {server}")


def config_use(args):
    """Set the current context."""
    GrafanaConfigManager().use_context(args.name)
    print(f"Switched to context '{args.name}'")


def config_delete(args):
    """Delete a context from the config file."""
    GrafanaConfigManager().delete_context(args.name)
    print(f"Context '{args.name}' deleted")


def config_show(args):
    """Show details of a context."""
    manager = GrafanaConfigManager()
    contexts = manager.load().get("contexts") or {}

    context_name = args.name or manager.get_current_context()
    if not context_name:
        fail("no context specified and no current context set")
    if context_name not in contexts:
        fail(f"context '{context_name}' not found")

    grafana = (contexts[context_name] or {}).get("grafana", {})

    print(f"Context: {context_name}")
    print(f"  Server:   {grafana.get('server', 'N/A')}")
    print(f"  Token:    {'*' * len(grafana.get('token', '')) or 'N/A'}")
    print(f"  User:     {grafana.get('user', 'N/A')}")
    print(f"  Password: {'*' * len(grafana.get('password', '')) or 'N/A'}")
    print(f"  Org ID:   {grafana.get('org-id', 'N/A')}")


def config_set(args):
    """Set a config value using dot notation."""
    GrafanaConfigManager().set_value(args.key, args.value)
    print(f"Set {args.key} = {args.value}")


# ============================================================================
# Extract Command
# ============================================================================


def extract_artifacts(args):
    """Extract dashboards from library archives into the artifact directory."""
    target_dir = args.artifact_dir or DEFAULT_ARTIFACT_DIR
    extracted = ArtifactExtractor(target_dir).extract(args.archives)
    print(f"\nExtracted {len(extracted)} files to {target_dir}")


# ============================================================================
# Collect Command
# ============================================================================


def resolve_dashboard_dir(args) -> Path | None:
    """Use the explicit dashboard dir, or the default one when it exists."""
    if args.dashboard_dir is not None:
        return args.dashboard_dir
    if DEFAULT_DASHBOARD_DIR.is_dir():
        return DEFAULT_DASHBOARD_DIR
    return None


def resolve_artifact_dir(args) -> Path | None:
    """Use the explicit artifact dir, or the default one when it exists."""
    if args.artifact_dir is not None:
        return args.artifact_dir
    if DEFAULT_ARTIFACT_DIR.is_dir():
        return DEFAULT_ARTIFACT_DIR
    return None


def build_collector(args, fail_fast: bool) -> DashboardCollector:
    dashboard_dir = resolve_dashboard_dir(args)
    artifact_dir = resolve_artifact_dir(args)
    classpath = ClasspathSet.from_paths(
        [root for root in (dashboard_dir, artifact_dir) if root is not None],
        args.classpath or classpath_from_env(),
    )
    engine = JsonnetScriptEngine(classpath, allow_objects=args.allow_object_scripts)
    creators = [StaticContentCreator(), ScriptContentCreator(engine)]
    return DashboardCollector(args.output_dir, creators, fail_fast=fail_fast, clean=args.clean)


def run_collection(args, fail_fast: bool) -> CollectionResult:
    print("=" * 42)
    print("Collecting Grafana dashboards...")
    print("=" * 42)
    dashboard_dir = resolve_dashboard_dir(args)
    artifact_dir = resolve_artifact_dir(args)
    print(f"Dashboard directory: {dashboard_dir or 'none'}")
    print(f"Artifact directory:  {artifact_dir or 'none'}")
    print(f"Output directory:    {args.output_dir}")

    collector = build_collector(args, fail_fast)
    result = collector.collect(directory_root=dashboard_dir, artifact_root=artifact_dir)
    print_collection_summary(result)
    return result


def print_collection_summary(result: CollectionResult):
    print(f"\nCollected {result.count} dashboards into {result.output_dir}")
    for name, dashboard in sorted(result.dashboards.items()):
        print(f"  ✓ {name} ({dashboard.source.kind}: {dashboard.source.path})")
    if result.failures:
        print(f"{len(result.failures)} dashboards failed:")
        for failure in result.failures:
            print(f"  ✗ {failure.path}: {failure}")


def collect_dashboards(args):
    """Collect dashboards into the output directory."""
    fail_fast = True if args.fail_fast is None else args.fail_fast
    try:
        result = run_collection(args, fail_fast)
    except CollectorError as e:
        fail(str(e))

    if not result.ok:
        sys.exit(1)


# ============================================================================
# Upload Command
# ============================================================================


def print_upload_summary(result: UploadResult):
    print(f"\nUpload complete: {result.count} succeeded, {len(result.failures)} failed")
    for failure in result.failures:
        print(f"  ✗ {failure.path.name}: {failure}")


def upload_dashboards(args):
    """Collect dashboards, then upload them to Grafana."""
    try:
        settings = resolve_grafana_settings(args.grafana_url, args.grafana_token, args.grafana_context)
        client = GrafanaClient(
            server=settings["server"],
            token=settings.get("token"),
            user=settings.get("user"),
            password=settings.get("password"),
            org_id=settings.get("org-id", 1),
            timeout=args.timeout,
        )

        collection_failed = False
        if not args.skip_collect:
            collection = run_collection(args, True if args.fail_fast is None else args.fail_fast)
            collection_failed = not collection.ok

        print("\nUploading dashboards to Grafana...")
        print(f"Server: {client.server}")
        uploader = DashboardUploader(client, folder=args.folder, fail_fast=bool(args.fail_fast), message=args.message)
        result = uploader.upload_directory(args.output_dir)
    except CollectorError as e:
        fail(str(e))

    print_upload_summary(result)

    if collection_failed or not result.ok:
        sys.exit(1)

    print("\n" + "=" * 42)
    print("Dashboards uploaded successfully!")
    print("=" * 42)


# ============================================================================
# CLI Setup and Main Entry Point
# ============================================================================


def classpath_from_env() -> list[Path]:
    value = os.environ.get("GRAFANA_CLASSPATH", "")
    return [Path(entry) for entry in value.split(os.pathsep) if entry]


def env_path(name: str) -> Path | None:
    value = os.environ.get(name)
    return Path(value) if value else None


def add_collect_args(parser):
    """Add the source/output arguments shared by collect and upload."""
    parser.add_argument(
        "--dashboard-dir",
        type=Path,
        default=env_path("DASHBOARD_DIR"),
        help="Directory with .json and .jsonnet dashboards (defaults to DASHBOARD_DIR env var "
        "or './grafana' when present)",
    )
    parser.add_argument(
        "--artifact-dir",
        type=Path,
        default=env_path("ARTIFACT_DIR"),
        help="Directory with dashboards extracted from artifacts (defaults to ARTIFACT_DIR env var "
        "or './build/grafana' when present)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=env_path("OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
        help="Directory receiving collected dashboards (defaults to OUTPUT_DIR env var or './build/grafana-dashboards')",
    )
    parser.add_argument(
        "--classpath",
        type=Path,
        action="append",
        help="Extra Jsonnet library directory, repeatable (defaults to GRAFANA_CLASSPATH env var)",
    )
    parser.add_argument("--clean", action="store_true", help="Remove previously collected dashboards first")
    parser.add_argument(
        "--allow-object-scripts",
        action="store_true",
        help="Accept scripts that evaluate to a Jsonnet object and write it as JSON",
    )
    parser.add_argument(
        "--fail-fast",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Abort on the first failing dashboard (default: on for collect, off for upload)",
    )


def add_grafana_args(parser):
    parser.add_argument(
        "--grafana-url",
        default=os.environ.get("GRAFANA_URL"),
        help="Grafana server URL (defaults to GRAFANA_URL env var or the context's server)",
    )
    parser.add_argument(
        "--grafana-token",
        default=os.environ.get("GRAFANA_TOKEN"),
        help="Grafana API token (defaults to GRAFANA_TOKEN env var or the context's token)",
    )
    parser.add_argument(
        "--grafana-context",
        default=os.environ.get("GRAFANA_CONTEXT"),
        help="Grafana context name (defaults to GRAFANA_CONTEXT env var or current-context in config)",
    )
    parser.add_argument("--folder", help="Grafana folder title to upload dashboards into")
    parser.add_argument("--message", help="Version history message for uploaded dashboards")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT, help=f"Per-request timeout in seconds (default {DEFAULT_TIMEOUT:g})"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grafana-collector",
        description="Collect static and Jsonnet Grafana dashboards and upload them to Grafana",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    # Config subcommand
    config_parser = subparsers.add_parser("config", help="Manage Grafana configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_command", required=True, help="Config commands")

    add_parser = config_subparsers.add_parser("add", help="Add a new context")
    add_parser.add_argument("name", help="Context name")
    add_parser.add_argument(
        "--server",
        default=os.environ.get("GRAFANA_URL"),
        required=not os.environ.get("GRAFANA_URL"),
        help="Grafana server URL (defaults to GRAFANA_URL env var)",
    )
    add_parser.add_argument("--token", default=os.environ.get("GRAFANA_TOKEN"), help="Grafana API token")
    add_parser.add_argument("--user", default=os.environ.get("GRAFANA_USER"), help="Grafana username")
    add_parser.add_argument("--password", default=os.environ.get("GRAFANA_PASSWORD"), help="Grafana password")
    add_parser.add_argument(
        "--org-id",
        type=int,
        default=int(os.environ.get("GRAFANA_ORG_ID", "1")),
        help="Grafana organization ID (defaults to GRAFANA_ORG_ID env var or 1)",
    )
    add_parser.add_argument("--use-context", action="store_true", help="Set as current context")
    add_parser.set_defaults(func=config_add)

    list_parser = config_subparsers.add_parser("list", help="List all contexts")
    list_parser.set_defaults(func=config_list)

    use_parser = config_subparsers.add_parser("use", help="Switch to a context")
    use_parser.add_argument("name", help="Context name")
    use_parser.set_defaults(func=config_use)

    show_parser = config_subparsers.add_parser("show", help="Show context details")
    show_parser.add_argument("name", nargs="?", help="Context name (defaults to current)")
    show_parser.set_defaults(func=config_show)

    delete_parser = config_subparsers.add_parser("delete", help="Delete a context")
    delete_parser.add_argument("name", help="Context name")
    delete_parser.set_defaults(func=config_delete)

    set_parser = config_subparsers.add_parser("set", help="Set a config value")
    set_parser.add_argument("key", help="Config key (e.g., contexts.myproject.grafana.token)")
    set_parser.add_argument("value", help="Config value")
    set_parser.set_defaults(func=config_set)

    # Extract subcommand
    extract_parser = subparsers.add_parser("extract", help="Extract dashboards from zip/jar artifacts")
    extract_parser.add_argument("archives", nargs="+", type=Path, help="Archives to extract, later ones win")
    extract_parser.add_argument(
        "--artifact-dir",
        type=Path,
        default=env_path("ARTIFACT_DIR"),
        help="Target directory (defaults to ARTIFACT_DIR env var or './build/grafana')",
    )
    extract_parser.set_defaults(func=extract_artifacts)

    # Collect subcommand
    collect_parser = subparsers.add_parser("collect", help="Collect dashboards into the output directory")
    add_collect_args(collect_parser)
    collect_parser.set_defaults(func=collect_dashboards)

    # Upload subcommand
    upload_parser = subparsers.add_parser("upload", help="Collect dashboards and upload them to Grafana")
    add_collect_args(upload_parser)
    add_grafana_args(upload_parser)
    upload_parser.add_argument(
        "--skip-collect", action="store_true", help="Upload the output directory as is, without collecting"
    )
    upload_parser.set_defaults(func=upload_dashboards)

    return parser


def main():
    """Main CLI entrypoint with subcommands."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except CollectorError as e:
        fail(str(e))


if __name__ == "__main__":
    main()
