"""
import_engine.settings - Per-file-schema import configuration.

One YAML file describes one spreadsheet layout: which column holds which
logical field, how the file is delimited, which taxonomies / properties /
option axes to fill, and how the run behaves.  See mappings/*.yaml.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

import config
from import_engine.errors import ColumnMapError, SettingsError
from import_engine.field_map import ColumnMap

IDENTITY_EXTERNAL_ID = "external_id"
IDENTITY_ALWAYS_NEW = "always_new"
IDENTITY_MODES = (IDENTITY_EXTERNAL_ID, IDENTITY_ALWAYS_NEW)


@dataclass(frozen=True)
class OptionAxis:
    name: str
    presentation: str
    field: str


DEFAULT_OPTION_AXES = (
    OptionAxis("Brand", "Marque", "Brand"),
    OptionAxis("Color", "Couleur", "Color"),
    OptionAxis("Size", "Taille", "Size"),
    OptionAxis("Age", "Age", "Age"),
)


@dataclass
class ImportSettings:
    column_mapping: dict[str, int] = field(default_factory=dict)
    field_delimiter: str = ","
    header_rows_to_skip: int = 1
    encoding: str = "utf-8"

    # Identity: "external_id" updates products whose identity property
    # matches; "always_new" turns every row into a new product.
    identity_mode: str = IDENTITY_EXTERNAL_ID
    identity_field: str = "Id"
    identity_property: str = "XmlImportId"

    default_shipping_category: str = ""
    default_tax_category: str = ""
    decode_html_in_names: bool = False
    decode_html_in_descriptions: bool = True
    destroy_preexisting_after_import: bool = False

    image_root_path: Path = field(default_factory=lambda: config.PRODUCT_IMAGE_DIR)
    image_fields: list[str] = field(default_factory=list)
    image_path_template: str = "{filename}"
    log_file_path: Path = field(default_factory=lambda: config.LOG_FILE)

    # taxonomy name → logical field holding the taxon value
    taxonomies: dict[str, str] = field(default_factory=dict)
    # property name → logical field holding the value
    properties: dict[str, str] = field(default_factory=dict)
    option_axes: list[OptionAxis] = field(default_factory=lambda: list(DEFAULT_OPTION_AXES))

    def __post_init__(self):
        self.image_root_path = Path(self.image_root_path)
        self.log_file_path = Path(self.log_file_path)
        self.validate()

    @property
    def columns(self) -> ColumnMap:
        return ColumnMap(self.column_mapping)

    @property
    def uses_external_id(self) -> bool:
        return self.identity_mode == IDENTITY_EXTERNAL_ID

    def validate(self) -> None:
        if not isinstance(self.column_mapping, dict) or not self.column_mapping:
            raise SettingsError("column_mapping must be a non-empty mapping")
        try:
            ColumnMap(self.column_mapping).validate()
        except ColumnMapError as exc:
            raise SettingsError(str(exc)) from exc

        if not isinstance(self.field_delimiter, str) or len(self.field_delimiter) != 1:
            raise SettingsError(
                f"field_delimiter must be a single character, got {self.field_delimiter!r}"
            )
        if (isinstance(self.header_rows_to_skip, bool)
                or not isinstance(self.header_rows_to_skip, int)
                or self.header_rows_to_skip < 0):
            raise SettingsError(
                f"header_rows_to_skip must be a non-negative integer, "
                f"got {self.header_rows_to_skip!r}"
            )
        if self.identity_mode not in IDENTITY_MODES:
            raise SettingsError(
                f"identity_mode must be one of {', '.join(IDENTITY_MODES)}, "
                f"got {self.identity_mode!r}"
            )
        if self.uses_external_id and self.identity_field not in self.column_mapping:
            raise SettingsError(
                f"identity_field '{self.identity_field}' is not in column_mapping"
            )
        for axis in self.option_axes:
            if not isinstance(axis, OptionAxis):
                raise SettingsError(f"Bad option axis: {axis!r}")


def settings_from_dict(data: dict[str, Any]) -> ImportSettings:
    """Build ImportSettings from a plain dict (as parsed from YAML)."""
    known = {f.name for f in fields(ImportSettings)}
    unknown = set(data) - known
    if unknown:
        raise SettingsError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    data = dict(data)
    if "option_axes" in data:
        data["option_axes"] = [_option_axis(a) for a in data["option_axes"] or []]
    for key in ("taxonomies", "properties"):
        if key in data and data[key] is None:
            data[key] = {}
    if data.get("image_fields") is None:
        data.pop("image_fields", None)
    for key in ("image_root_path", "log_file_path"):
        if data.get(key) is None:
            data.pop(key, None)

    try:
        return ImportSettings(**data)
    except TypeError as exc:
        raise SettingsError(str(exc)) from exc


def load_settings(path: str | Path) -> ImportSettings:
    """Read a YAML mapping file.  Relative paths inside it resolve against config.BASE_DIR."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise SettingsError(f"Cannot read settings {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise SettingsError(f"{path} must contain a mapping at top level")

    for key in ("image_root_path", "log_file_path"):
        if data.get(key):
            p = Path(data[key])
            data[key] = p if p.is_absolute() else config.BASE_DIR / p
    return settings_from_dict(data)


def _option_axis(raw: Any) -> OptionAxis:
    if isinstance(raw, str):
        return OptionAxis(raw, raw, raw)
    if isinstance(raw, dict) and raw.get("name"):
        name = str(raw["name"])
        return OptionAxis(
            name=name,
            presentation=str(raw.get("presentation") or name),
            field=str(raw.get("field") or name),
        )
    raise SettingsError(f"Bad option axis: {raw!r}")
