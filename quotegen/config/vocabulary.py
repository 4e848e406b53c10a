"""Term tables used by keyword extraction, catalogue filtering and matching.

Kept as plain data so deployments can swap them through Settings without
touching the pipeline code.
"""

from typing import Dict, FrozenSet, Tuple

# Words dropped before searching the catalogue.
STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "in", "on", "for", "with", "i", "want", "to", "build",
    "and", "is", "it", "will", "be", "area", "size", "using", "out", "of",
    "which", "currently", "grass", "metres", "meters", "metre", "meter",
    "long", "high", "wide", "deep", "by", "from", "project", "job", "new",
    "need", "needs", "like", "would", "some", "about", "approx",
    "approximately", "around", "into", "onto", "our", "my", "we", "you",
    "please", "quote", "garden", "back", "front", "install", "lay",
    "replace", "make", "put", "get", "have", "has", "that", "this", "there",
    "also", "all", "any", "up", "down", "at", "as", "or", "so",
})

# Additive expansions: the original token is always kept.
SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "patio": ("paving", "stone", "slab", "flags"),
    "paving": ("slab", "flags"),
    "fencing": ("fence", "panel", "post", "timber", "gravelboard"),
    "fence": ("panel", "post", "gravelboard"),
    "cement": ("mortar", "joint", "filler", "bonding"),
    "aggregate": ("sand", "gravel", "ballast", "mot", "sub-base", "hardcore"),
    "wall": ("bricks", "blocks", "render", "pier", "footing", "coping"),
    "driveway": ("block", "paving", "edging", "sub-base"),
    "decking": ("deck", "board", "joist", "timber"),
}

# Natural-stone post filter for catalogue results.
NATURAL_STONE_TRIGGERS: Tuple[str, ...] = ("natural stone",)
NATURAL_STONE_DISQUALIFIERS: Tuple[str, ...] = ("concrete", "utility", "pressed")
NATURAL_STONE_QUALIFIERS: Tuple[str, ...] = (
    "natural", "sandstone", "limestone", "slate", "granite", "yorkstone",
    "travertine", "marble", "quartzite",
)

# Colour-dye variants that are never a sensible answer for a material line.
EXCLUDED_MODIFIERS: Tuple[str, ...] = ("pigment", "dye", "colourant", "colorant", "tint")

# Marker the plan prompt asks the model to use for unmatched materials.
TO_BE_QUOTED_MARKER = "(to be quoted)"
