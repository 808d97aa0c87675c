from __future__ import annotations

from typing import Iterable, Mapping

from storefront.services.text import normalize

# Canonical term -> spellings customers actually type. Keys and values are
# compared after normalization, so accents and case do not matter here.
CORRECTIONS: dict[str, list[str]] = {
    "lissage": ["lisage", "lissag", "lissages", "lisages", "lisagge"],
    "bresilien": ["bresillien", "brezilien", "brasilien", "bresilienne", "brazilian"],
    "keratine": ["keratin", "keratinne", "keratyne", "kératine", "queratine"],
    "botox": ["botoxe", "bottox", "botex"],
    "tanin": ["tannin", "tanino", "taninoplastie", "tanninoplastie"],
    "shampoing": ["shampooing", "shampoo", "champoing", "shampoin", "shampong"],
    "apres shampoing": ["apres shampooing", "apres-shampoing", "conditionneur", "conditioner"],
    "masque": ["mask", "masq", "masques", "maske"],
    "capillaire": ["capilaire", "capillair", "capilair"],
    "decolorante": ["decolorant", "decoloration", "decolorente", "decolarante"],
    "coloration": ["colloration", "colorasion", "coloracion"],
    "coreen": ["coreenne", "korean", "koreen"],
    "maquillage": ["maquilage", "makeup", "make up", "maquiage", "maquillages"],
    "serum": ["cerum", "serume", "sirum"],
    "argan": ["argane", "argann", "argant"],
    "proteine": ["protein", "proteines", "proteinne"],
    "collagene": ["colagene", "collagen", "colagen"],
    "hyaluronique": ["hyaluronic", "hialuronique", "hyaluronik", "hyaluronic acid"],
    "vitamine": ["vitamin", "vitamines", "vitamne"],
    "creme": ["crem", "cream", "cremes", "creeme"],
    "visage": ["visag", "vissage", "face"],
    "soin": ["soins", "soint"],
    "huile": ["huil", "huille", "oil"],
    "parfum": ["parfun", "perfume", "parfums"],
    "vernis": ["verni", "vernie", "vernis a ongle"],
    "rouge a levres": ["rouge a levre", "rouge levre", "lipstick"],
    "mascara": ["maskara", "mascarra"],
    "fond de teint": ["fond teint", "fondteint", "foundation"],
    "defrisant": ["defrissant", "defrizant", "defrisage"],
    "lisseur": ["liseur", "lisseure", "fer a lisser"],
}


def build_variant_groups(corrections: Mapping[str, Iterable[str]]) -> dict[str, frozenset[str]]:
    """
    Compiles the correction table into spelling groups. Every spelling maps to
    the full group it belongs to, which makes the relation symmetric; groups
    that share a spelling are merged.
    """
    groups: dict[str, set[str]] = {}
    for canonical, variants in corrections.items():
        members = {normalize(canonical)} | {normalize(variant) for variant in variants}
        members.discard("")
        merged = set(members)
        for member in members:
            existing = groups.get(member)
            if existing is not None and existing is not merged:
                merged |= existing
        for member in merged:
            groups[member] = merged
    return {spelling: frozenset(group) for spelling, group in groups.items()}


_GROUPS = build_variant_groups(CORRECTIONS)


def expand(term: str, groups: Mapping[str, frozenset[str]] | None = None) -> frozenset[str]:
    """
    Returns the known spellings of ``term``, always including the normalized
    term itself. Multi-word terms additionally get one word at a time swapped
    for its alternates ("kit lisage" -> "kit lissage").
    """
    table = _GROUPS if groups is None else groups
    normalized = normalize(term)
    if not normalized:
        return frozenset()

    variants: set[str] = {normalized}
    variants |= table.get(normalized, frozenset())

    words = normalized.split(" ")
    if len(words) > 1:
        for index, word in enumerate(words):
            for alternate in table.get(word, frozenset()):
                if alternate == word:
                    continue
                variants.add(" ".join(words[:index] + [alternate] + words[index + 1 :]))

    return frozenset(variants)
