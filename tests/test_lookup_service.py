from db.models import OptionType, Property, Taxon, Taxonomy
from services.lookup_service import find_or_create


def test_find_or_create_is_idempotent(session):
    first, created = find_or_create(session, OptionType, name="Color", presentation="Couleur")
    second, created_again = find_or_create(session, OptionType, name="Color", presentation="Couleur")
    assert created is True
    assert created_again is False
    assert first is second
    assert session.query(OptionType).count() == 1


def test_defaults_are_not_part_of_the_key(session):
    prop, _ = find_or_create(session, Property, defaults={"presentation": "Id"}, name="XmlImportId")
    again, created = find_or_create(session, Property, defaults={"presentation": "Other"}, name="XmlImportId")
    assert again is prop
    assert created is False
    assert again.presentation == "Id"


def test_find_or_create_taxonomy_twice_yields_same_instance(catalog, session):
    first, created = catalog.find_or_create_taxonomy("Category")
    second, created_again = catalog.find_or_create_taxonomy("Category")
    assert first is second
    assert (created, created_again) == (True, False)
    assert session.query(Taxonomy).count() == 1
    # the root taxon is created once, with the taxonomy
    assert session.query(Taxon).count() == 1
    assert first.root.name == "Category"


def test_option_value_is_reused_per_type(catalog, session):
    color = catalog.find_or_create_option_type("Color", "Couleur")
    size = catalog.find_or_create_option_type("Size", "Taille")
    red = catalog.find_or_create_option_value(color, "Red")
    assert catalog.find_or_create_option_value(color, "Red", "Rouge") is red
    assert red.presentation == "Red"
    # same name on another axis is a different value
    assert catalog.find_or_create_option_value(size, "Red") is not red
