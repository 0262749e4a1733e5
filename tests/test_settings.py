from pathlib import Path

import pytest

import config
from import_engine.errors import SettingsError
from import_engine.settings import (
    DEFAULT_OPTION_AXES, IDENTITY_ALWAYS_NEW, ImportSettings, OptionAxis,
    load_settings, settings_from_dict,
)

MAPPINGS = Path(__file__).resolve().parent.parent / "mappings"


def test_default_mapping_file_loads():
    settings = load_settings(MAPPINGS / "default.yaml")
    assert settings.uses_external_id
    assert settings.identity_property == "XmlImportId"
    assert settings.field_delimiter == ","
    assert settings.header_rows_to_skip == 1
    assert settings.column_mapping["Name"] == 2
    assert settings.taxonomies == {"Category": "Category", "Gender": "Gender"}
    assert settings.option_axes[0] == OptionAxis("Brand", "Marque", "Brand")
    assert settings.image_root_path.is_absolute()
    assert settings.image_root_path == config.BASE_DIR / "product_data" / "product-images"


def test_supplier_mapping_file_loads():
    settings = load_settings(MAPPINGS / "globalener.yaml")
    assert settings.identity_mode == IDENTITY_ALWAYS_NEW
    assert not settings.uses_external_id
    assert settings.field_delimiter == "|"
    assert settings.option_axes == []
    assert settings.properties["SupplierId"] == "Supplier Id"
    assert settings.image_path_template == "{Supplier Id}/{filename}"


def test_defaults():
    settings = ImportSettings(column_mapping={"Id": 0})
    assert settings.option_axes == list(DEFAULT_OPTION_AXES)
    assert settings.decode_html_in_descriptions is True
    assert settings.decode_html_in_names is False
    assert settings.destroy_preexisting_after_import is False
    assert settings.log_file_path == config.LOG_FILE


def test_option_axes_short_form():
    settings = settings_from_dict({
        "column_mapping": {"Id": 0},
        "option_axes": ["Material", {"name": "Color", "presentation": "Couleur"}],
    })
    assert settings.option_axes == [
        OptionAxis("Material", "Material", "Material"),
        OptionAxis("Color", "Couleur", "Color"),
    ]


@pytest.mark.parametrize("data, match", [
    ({}, "column_mapping"),
    ({"column_mapping": {"Id": -1}}, "non-negative"),
    ({"column_mapping": {"Id": 0}, "field_delimiter": "||"}, "field_delimiter"),
    ({"column_mapping": {"Id": 0}, "header_rows_to_skip": -2}, "header_rows_to_skip"),
    ({"column_mapping": {"Id": 0}, "identity_mode": "sometimes"}, "identity_mode"),
    ({"column_mapping": {"Name": 0}}, "identity_field"),
    ({"column_mapping": {"Id": 0}, "colour": "red"}, "Unknown setting"),
    ({"column_mapping": {"Id": 0}, "option_axes": [{"presentation": "x"}]}, "option axis"),
])
def test_invalid_settings(data, match):
    with pytest.raises(SettingsError, match=match):
        settings_from_dict(data)


def test_always_new_mode_needs_no_identity_column():
    settings = settings_from_dict({"column_mapping": {"Name": 0}, "identity_mode": "always_new"})
    assert not settings.uses_external_id


def test_load_settings_errors(tmp_path):
    with pytest.raises(SettingsError, match="Cannot read"):
        load_settings(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("column_mapping: [unclosed\n", encoding="utf-8")
    with pytest.raises(SettingsError, match="Invalid YAML"):
        load_settings(bad)

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just a string\n", encoding="utf-8")
    with pytest.raises(SettingsError, match="mapping"):
        load_settings(scalar)


def test_absolute_paths_are_kept(tmp_path):
    path = tmp_path / "m.yaml"
    path.write_text(
        "column_mapping: {Id: 0}\n"
        f"image_root_path: {tmp_path / 'imgs'}\n"
        f"log_file_path: {tmp_path / 'run.log'}\n",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.image_root_path == tmp_path / "imgs"
    assert settings.log_file_path == tmp_path / "run.log"
