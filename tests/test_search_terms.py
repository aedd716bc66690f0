from __future__ import annotations

import pytest

from glasscase.models.item import ItemAttributes, category_phrase
from glasscase.services.search_terms import generate


def test_hen_on_nest_fenton_terms_in_order() -> None:
    attrs = ItemAttributes(name="Hen on Nest", category="milk_glass", manufacturer="Fenton")
    terms = generate(attrs)

    wanted = ["Hen on Nest milk glass", "Fenton milk glass", "Fenton Hen on Nest milk glass"]
    positions = [terms.index(t) for t in wanted]
    assert positions == sorted(positions)
    assert terms[:3] == [
        "Hen on Nest milk glass",
        "milk glass Hen on Nest",
        "vintage milk glass Hen on Nest",
    ]
    assert all(t.strip() == t and t for t in terms)


def test_base_terms_only() -> None:
    terms = generate(ItemAttributes(name="Cake Stand", category="jadite"))
    assert terms == ["Cake Stand jadite", "jadite Cake Stand", "vintage jadite Cake Stand"]


def test_pattern_terms_come_last() -> None:
    attrs = ItemAttributes(
        name="Bowl", category="milk_glass", manufacturer="Anchor Hocking", pattern="Hobnail"
    )
    terms = generate(attrs)
    assert terms[-2:] == ["Hobnail milk glass", "milk glass Hobnail"]


@pytest.mark.parametrize(
    "attrs",
    [
        ItemAttributes(name="Hen on Nest", category="milk_glass", manufacturer="Fenton"),
        ItemAttributes(name="Restaurant Mug", category="jadite", manufacturer="Fire-King", pattern="Jane Ray"),
        ItemAttributes(name="Vase", category="blue_glass", pattern="Hobnail"),
        ItemAttributes(name="  Candy Dish ", category="custom_carnival", manufacturer="   "),
    ],
)
def test_terms_distinct_and_category_qualified(attrs: ItemAttributes) -> None:
    terms = generate(attrs)
    phrase = category_phrase(attrs.category)
    assert len(terms) >= 3
    assert len(terms) == len(set(terms))
    assert all(phrase in t for t in terms)
    assert all(t for t in terms)


def test_blank_manufacturer_is_ignored() -> None:
    terms = generate(ItemAttributes(name="Plate", category="jadite", manufacturer="  ", pattern=""))
    assert len(terms) == 3


def test_category_phrase_for_custom_ids() -> None:
    assert category_phrase("milk_glass") == "milk glass"
    assert category_phrase("depression_pink_glass") == "depression pink glass"
