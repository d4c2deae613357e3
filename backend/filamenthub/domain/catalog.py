"""Predefined filament materials and Bambu Lab printer models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class MaterialColor:
    name: str
    hex: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Material:
    id: str
    name: str
    description: str
    category: str  # standard | engineering | specialty | support
    printing_temp: Optional[Tuple[int, int]] = None
    colors: Tuple[MaterialColor, ...] = field(default_factory=tuple)


STANDARD_COLORS: Tuple[MaterialColor, ...] = (
    MaterialColor("Black", "#000000"),
    MaterialColor("White", "#FFFFFF"),
    MaterialColor("Gray", "#808080"),
    MaterialColor("Light Gray", "#D3D3D3"),
    MaterialColor("Dark Gray", "#404040"),
    MaterialColor("Natural", "#F5F5DC", "Translucent/clear natural color"),
    MaterialColor("Clear", "#F0F8FF", "Transparent"),
    MaterialColor("Red", "#FF0000"),
    MaterialColor("Blue", "#0000FF"),
    MaterialColor("Green", "#008000"),
    MaterialColor("Yellow", "#FFFF00"),
    MaterialColor("Orange", "#FFA500"),
    MaterialColor("Purple", "#800080"),
    MaterialColor("Pink", "#FFC0CB"),
    MaterialColor("Brown", "#A52A2A"),
    MaterialColor("Beige", "#F5F5DC"),
)

SPECIAL_COLORS: Tuple[MaterialColor, ...] = (
    MaterialColor("Silk Black", "#1a1a1a", "Glossy silk finish"),
    MaterialColor("Silk White", "#FAFAFA", "Glossy silk finish"),
    MaterialColor("Silk Red", "#DC143C", "Glossy silk finish"),
    MaterialColor("Silk Blue", "#0047AB", "Glossy silk finish"),
    MaterialColor("Silk Gold", "#FFD700", "Glossy silk finish"),
    MaterialColor("Matte Black", "#2B2B2B", "Non-reflective matte finish"),
    MaterialColor("Matte White", "#F8F8F8", "Non-reflective matte finish"),
    MaterialColor("Metallic Silver", "#C0C0C0", "Metallic finish"),
    MaterialColor("Metallic Gold", "#FFD700", "Metallic finish"),
    MaterialColor("Metallic Copper", "#B87333", "Metallic finish"),
    MaterialColor("Glow Green", "#00FF00", "Glow-in-the-dark"),
    MaterialColor("Carbon Fiber Black", "#1C1C1C", "Carbon fiber reinforced"),
    MaterialColor("Wood Natural", "#DEB887", "Wood-filled filament"),
)


def _special(*prefixes: str) -> Tuple[MaterialColor, ...]:
    return tuple(c for c in SPECIAL_COLORS if c.name.startswith(prefixes))


MATERIALS: Tuple[Material, ...] = (
    Material("pla", "PLA", "Polylactic Acid - easy to print, low warping", "standard", (190, 220),
             STANDARD_COLORS + _special("Silk", "Matte", "Metallic", "Glow", "Wood")),
    Material("abs", "ABS", "Acrylonitrile Butadiene Styrene - strong, heat resistant", "standard", (220, 260),
             STANDARD_COLORS + _special("Matte", "Metallic")),
    Material("petg", "PETG", "Polyethylene Terephthalate Glycol - chemical resistant", "standard", (220, 250),
             STANDARD_COLORS + _special("Metallic")),
    Material("pla-plus", "PLA+", "Enhanced PLA - improved strength", "standard", (200, 230), STANDARD_COLORS),
    Material("tpu", "TPU", "Thermoplastic Polyurethane - flexible", "specialty", (210, 230),
             tuple(c for c in STANDARD_COLORS if "Clear" not in c.name)),
    Material("asa", "ASA", "Acrylonitrile Styrene Acrylate - UV resistant", "engineering", (240, 270),
             tuple(c for c in STANDARD_COLORS if "Clear" not in c.name)),
    Material("pc", "PC", "Polycarbonate - high strength and temperature resistance", "engineering", (270, 310)),
    Material("pa", "PA (Nylon)", "Polyamide - tough, low friction", "engineering", (250, 290),
             _special("Carbon Fiber")),
    Material("pa-cf", "PA-CF", "Carbon fiber reinforced nylon", "engineering", (270, 300)),
    Material("pva", "PVA", "Polyvinyl Alcohol - water-soluble support", "support", (190, 220)),
    Material("hips", "HIPS", "High Impact Polystyrene - support material", "support", (220, 250)),
    Material("wood-pla", "Wood PLA", "Wood-filled PLA", "specialty", (190, 220)),
    Material("metal-pla", "Metal PLA", "Metal-filled PLA", "specialty", (190, 220)),
    Material("glow-pla", "Glow PLA", "Glow-in-the-dark PLA", "specialty", (190, 220)),
)

# Only these get one dropdown option per colour.
COLORED_VARIANT_MATERIALS = ("PLA", "ABS", "PETG")

PRINTERS: Tuple[str, ...] = ("A1 mini", "A1", "H2D", "P1P", "P1S", "X1 Carbon", "X1E")


def all_material_names() -> List[str]:
    return sorted(m.name for m in MATERIALS)


def material_options(extra_materials: Iterable[str] = ()) -> List[Dict[str, str]]:
    """Dropdown options: every catalogue material, colour variants for the
    popular ones, and any stored material missing from the catalogue under
    the ``custom`` category. Sorted by label, no duplicate values."""
    options: Dict[str, Dict[str, str]] = {}
    for material in MATERIALS:
        options[material.name] = {"value": material.name, "label": material.name, "category": material.category}
        if material.name not in COLORED_VARIANT_MATERIALS:
            continue
        for color in material.colors:
            if color.name in ("Natural", "Clear"):
                continue
            label = f"{material.name} {color.name}"
            options[label] = {"value": label, "label": label, "category": material.category}
    for name in extra_materials:
        if name and name not in options:
            options[name] = {"value": name, "label": name, "category": "custom"}
    return sorted(options.values(), key=lambda o: o["label"])
