"""
api.routes_import - /api/v1/import endpoint.

Accepts a data file via multipart upload or raw request body, stages it
under config.DATA_FILES_DIR and runs the product import on it.
"""

import os
import re
import tempfile
from dataclasses import replace

from flask import request, jsonify

import config
from api import api_bp
from import_engine import run_import, load_settings
from import_engine.errors import SettingsError

_MAPPING_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


@api_bp.route("/import", methods=["POST"])
def api_import_products():
    """
    POST /api/v1/import?mapping=default&destroy=0|1

    Multipart: field name 'data_file'
    Or: raw file as request body (Content-Type: text/csv).
    """
    mapping = request.args.get("mapping", "").strip()
    destroy = request.args.get("destroy", "0") == "1"

    if mapping:
        if not _MAPPING_NAME.match(mapping):
            return jsonify({"error": "bad mapping name"}), 400
        settings_path = config.MAPPINGS_DIR / f"{mapping}.yaml"
        if not settings_path.exists():
            return jsonify({"error": f"unknown mapping '{mapping}'"}), 400
    else:
        settings_path = config.IMPORT_SETTINGS

    try:
        settings = load_settings(settings_path)
    except SettingsError as exc:
        return jsonify({"error": str(exc)}), 400
    if destroy:
        settings = replace(settings, destroy_preexisting_after_import=True)

    if request.content_type and "multipart" in request.content_type:
        f = request.files.get("data_file")
        if not f:
            return jsonify({"error": "no data_file in upload"}), 400
        content = f.read()
    else:
        content = request.get_data()

    if not content:
        return jsonify({"error": "empty body"}), 400

    config.DATA_FILES_DIR.mkdir(parents=True, exist_ok=True)
    fd, staged = tempfile.mkstemp(suffix=".csv", dir=config.DATA_FILES_DIR)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
        report = run_import(staged, settings)
    finally:
        os.unlink(staged)

    return jsonify(report.to_dict())
