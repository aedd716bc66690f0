from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Category(str, Enum):
    MILK_GLASS = "milk_glass"
    JADITE = "jadite"
    BLUE_GLASS = "blue_glass"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ")


def category_phrase(category: str) -> str:
    """Human phrase for a category id, e.g. ``milk_glass`` -> ``milk glass``.

    User-defined categories are not part of :class:`Category`; they get the same
    underscore-to-space treatment.
    """
    try:
        return Category(category).display_name
    except ValueError:
        return " ".join(category.replace("_", " ").split())


class ItemAttributes(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    manufacturer: str | None = None
    pattern: str | None = None
    description: str | None = None
