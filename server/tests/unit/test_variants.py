import pytest

from storefront.services.variants import CORRECTIONS, build_variant_groups, expand
from storefront.services.text import normalize


def test_expand_always_contains_the_term() -> None:
    assert expand("gommage") == frozenset({"gommage"})
    assert "lissage" in expand("lissage")


def test_expand_normalizes_input() -> None:
    assert "lissage" in expand("  LISAGE ")
    assert "keratine" in expand("Kératine")


def test_expand_maps_misspelling_to_canonical_and_back() -> None:
    assert "lissage" in expand("lisage")
    assert "lisage" in expand("lissage")


def test_expand_of_empty_term_is_empty() -> None:
    assert expand("") == frozenset()
    assert expand("  ?! ") == frozenset()


@pytest.mark.parametrize("canonical", sorted(CORRECTIONS))
def test_expansion_is_symmetric_over_table_pairs(canonical: str) -> None:
    for variant in CORRECTIONS[canonical]:
        a, b = normalize(canonical), normalize(variant)
        assert b in expand(a)
        assert a in expand(b)


def test_expansion_is_symmetric_across_every_returned_spelling() -> None:
    for spelling in ("lisage", "shampoo", "rouge a levre", "kit lisage", "apres shampooing"):
        for other in expand(spelling):
            assert normalize(spelling) in expand(other)


def test_multi_word_terms_substitute_one_word_at_a_time() -> None:
    variants = expand("kit lisage")

    assert "kit lisage" in variants
    assert "kit lissage" in variants
    assert "kit lissag" in variants


def test_build_variant_groups_merges_groups_sharing_a_spelling() -> None:
    groups = build_variant_groups({"alpha": ["alfa"], "alfa": ["alpah"]})

    assert groups["alpha"] == groups["alpah"] == frozenset({"alpha", "alfa", "alpah"})


def test_expand_accepts_custom_groups() -> None:
    groups = build_variant_groups({"vernis": ["verni"]})

    assert expand("verni", groups) == frozenset({"vernis", "verni"})
    assert expand("lisage", groups) == frozenset({"lisage"})
