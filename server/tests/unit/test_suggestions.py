from storefront.models.products import ProductRecord
from storefront.services.suggestions import generate_suggestions


def make_catalog() -> list[ProductRecord]:
    return [
        ProductRecord(id="1", name="Masque Capillaire Argan", brandName="Argania"),
        ProductRecord(id="2", name="Huile d'Argan Pure", brandName="Argania"),
        ProductRecord(id="3", name="Sérum Éclat", brandName="Argan Lab"),
        ProductRecord(id="4", name="Kit Lissage Brésilien", brandName="Inoar"),
    ]


def test_returns_original_names_and_brands_in_catalog_order():
    suggestions = generate_suggestions("argan", make_catalog(), 10)

    assert suggestions == [
        "Masque Capillaire Argan",
        "Argania",
        "Huile d'Argan Pure",
        "Argan Lab",
    ]


def test_suggestions_are_distinct_and_bounded():
    assert generate_suggestions("argan", make_catalog(), 2) == ["Masque Capillaire Argan", "Argania"]


def test_matches_accent_insensitively():
    assert generate_suggestions("eclat", make_catalog(), 5) == ["Sérum Éclat"]
    assert generate_suggestions("BRÉSIL", make_catalog(), 5) == ["Kit Lissage Brésilien"]


def test_no_match_or_invalid_bounds_return_empty():
    catalog = make_catalog()

    assert generate_suggestions("shampoing", catalog, 5) == []
    assert generate_suggestions("argan", catalog, 0) == []
    assert generate_suggestions("   ", catalog, 5) == []
    assert generate_suggestions("argan", [], 5) == []


def test_exactly_max_count_when_more_names_match():
    catalog = [ProductRecord(id=str(index), name=f"Vernis Rouge {index}") for index in range(10)]

    suggestions = generate_suggestions("vernis", catalog, 3)

    assert suggestions == ["Vernis Rouge 0", "Vernis Rouge 1", "Vernis Rouge 2"]
