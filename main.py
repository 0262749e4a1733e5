#!/usr/bin/env python3
"""
Catalog importer - product import service and command line.

    python main.py serve                     run the HTTP API
    python main.py import FILE [options]     import one data file

See config.py for all environment-variable tunables and mappings/ for
the per-file column layouts.
"""

import argparse
import sys
from dataclasses import replace

from flask import Flask, jsonify

import config
from db import init_db
from api import api_bp
from import_engine import run_import, load_settings
from import_engine.errors import SettingsError
from import_engine.report import FAILED, SKIPPED_INVALID


def create_app(db_url: str | None = None) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    app.secret_key = config.SECRET
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES

    # ── Initialise database ─────────────────────────────────────────
    init_db(db_url or config.DB_URL)

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    return app


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Product catalog importer")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the HTTP API")

    imp = sub.add_parser("import", help="Import products from a delimited file")
    imp.add_argument("file_path", type=str, help="Path to the data file")
    imp.add_argument(
        "--settings",
        type=str,
        default=str(config.IMPORT_SETTINGS),
        help="YAML column mapping / import settings (default: %(default)s)",
    )
    imp.add_argument(
        "--destroy-existing",
        action="store_true",
        help="Delete products that existed before the import once it finishes",
    )
    return parser


def _import(args) -> int:
    try:
        settings = load_settings(args.settings)
    except SettingsError as exc:
        print(f"  Bad settings: {exc}", file=sys.stderr)
        return 2
    if args.destroy_existing:
        settings = replace(settings, destroy_preexisting_after_import=True)

    init_db(config.DB_URL)
    report = run_import(args.file_path, settings)

    summary = report.to_dict()
    print(f"\n  {report.message}")
    print(f"  Created: {summary['created']}  Updated: {summary['updated']}  "
          f"Skipped: {summary['skipped']}  Failed: {summary['failed']}  "
          f"Destroyed: {summary['destroyed']}  / {summary['total_rows']} rows")
    problems = [o for o in report.outcomes if o.status in (SKIPPED_INVALID, FAILED)]
    if problems:
        print("  First problems (max 10):")
        for o in problems[:10]:
            print(f"    Row {o.row}: {o.message}")
    return 0 if report.ok else 1


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)

    if args.command == "import":
        return _import(args)

    app = create_app()
    print("=" * 56)
    print("  Catalog importer")
    print(f"  Database: {config.DB_URL}")
    print(f"  http://{config.HOST}:{config.PORT}")
    print("=" * 56)
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
    return 0


if __name__ == "__main__":
    sys.exit(main())
