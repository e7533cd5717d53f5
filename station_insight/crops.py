"""Reference table of growing-degree-day requirements per crop."""

from __future__ import annotations

from typing import Dict, List

from station_insight.domain import CropProfile


def _crop(category: str, name: str, gdd_min: float, gdd_max: float, base_temp: float) -> CropProfile:
    return CropProfile(name=name, category=category, gdd_min=gdd_min, gdd_max=gdd_max, base_temp=base_temp)


CROP_DATABASE: List[CropProfile] = [
    _crop("Cereals", "Oats", 1200, 1400, 0),
    _crop("Cereals", "Barley", 1200, 1400, 0),
    _crop("Cereals", "Soft wheat", 1400, 1600, 0),
    _crop("Cereals", "Durum wheat", 1600, 1800, 0),
    _crop("Cereals", "Rice", 1800, 2500, 10),
    _crop("Cereals", "Maize (grain)", 1000, 1400, 6),
    _crop("Fruits", "Grapes", 1600, 2000, 10),
    _crop("Fruits", "Strawberries", 800, 1200, 5),
    _crop("Fruits", "Cherries", 1200, 1500, 7),
    _crop("Fruits", "Pears", 1500, 2000, 7),
    _crop("Fruits", "Apples", 1500, 2000, 7),
    _crop("Fruits", "Peaches", 2000, 2500, 7),
    _crop("Vegetables", "Peppers", 1100, 1300, 10),
    _crop("Vegetables", "Tomatoes", 1200, 1500, 10),
    _crop("Vegetables", "Courgettes", 900, 1100, 10),
    _crop("Vegetables", "Cucumbers", 900, 1200, 10),
    _crop("Vegetables", "Carrots", 1000, 1200, 4),
    _crop("Vegetables", "Spinach", 500, 800, 4),
    _crop("Vegetables", "Cabbages", 1000, 1200, 5),
    _crop("Vegetables", "Lettuces", 800, 1000, 5),
    _crop("Vegetables", "Potatoes", 1200, 1500, 8),
    _crop("Legumes", "Green beans", 1000, 1200, 10),
    _crop("Legumes", "Chickpeas", 1200, 1500, 5),
    _crop("Legumes", "Lentils", 800, 1200, 5),
    _crop("Legumes", "Peas", 900, 1100, 5),
    _crop("Aromatic & medicinal plants", "Lavender", 1000, 1200, 10),
    _crop("Aromatic & medicinal plants", "Basil", 800, 1000, 10),
    _crop("Aromatic & medicinal plants", "Mint", 500, 800, 5),
    _crop("Aromatic & medicinal plants", "Thyme", 500, 800, 5),
]


def find_crop(name: str | None) -> CropProfile | None:
    """Look up a crop by name, ignoring case and surrounding whitespace."""
    if not name:
        return None
    wanted = name.strip().casefold()
    for crop in CROP_DATABASE:
        if crop.name.casefold() == wanted:
            return crop
    return None


def crops_by_category() -> Dict[str, List[CropProfile]]:
    """Group the table by category, preserving table order."""
    grouped: Dict[str, List[CropProfile]] = {}
    for crop in CROP_DATABASE:
        grouped.setdefault(crop.category, []).append(crop)
    return grouped
