"""
Colour Assignment
=================
Deterministic, seeded distribution of grid units over the three colour groups,
plus resolution of a group into fill/stroke material parameters.

The same (unit order, frequencies, seed) always yields the same assignment, which
is what lets saved and shared projects reproduce their look exactly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple
import logging
import random

from circlematrix.model.layout import GridUnit
from circlematrix.model.settings import ColorGroupConfig

logger = logging.getLogger(__name__)

SEED_RANGE = 1_000_000


class SeededRandom:
    """
    Linear congruential generator.

    state' = (state * 9301 + 49297) mod 233280, output state' / 233280 in [0, 1).
    """
    MULTIPLIER = 9301
    INCREMENT = 49297
    MODULUS = 233280

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self.state = seed

    def next(self) -> float:
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) % self.MODULUS
        return self.state / self.MODULUS

    def __iter__(self) -> SeededRandom:
        return self

    def __next__(self) -> float:
        return self.next()


def new_color_seed() -> int:
    """Draw a fresh, non-deterministic colour seed."""
    return random.randrange(SEED_RANGE)


def classify(value: float, probabilities: Sequence[float]) -> int:
    """Map a draw in [0, 1) to a group index using cumulative probabilities."""
    if value < probabilities[0]:
        return 0
    if value < probabilities[0] + probabilities[1]:
        return 1
    return 2


def assign_color_groups(
    units: Iterable[GridUnit],
    frequencies: Sequence[float],
    seed: Optional[int]
) -> int:
    """
    Set `color_group` on every unit, in iteration order.

    Args:
        units: Units in generator (row-major) order.
        frequencies: Relative weights of the three groups; at least one must be positive.
        seed: Colour seed. When None a random seed is drawn and reported.

    Returns:
        The seed actually used.
    """
    if seed is None:
        seed = new_color_seed()
        logger.warning(f"No colour seed supplied; substituting random seed {seed}.")

    total = sum(frequencies)
    probabilities = [f / total for f in frequencies]

    rng = SeededRandom(seed)
    count = 0
    for unit in units:
        unit.color_group = classify(rng.next(), probabilities)
        count += 1

    logger.debug(f"Assigned colour groups to {count} units with seed {seed}.")
    return seed


# ------------------------------------------------------------------------------
# Materials
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class MaterialSpec:
    """Render-agnostic flat material: RGB colour (0-255) and opacity."""
    color: Tuple[int, int, int]
    opacity: float

    @property
    def transparent(self) -> bool:
        return self.opacity < 1.0


def resolve_materials(
    groups: Sequence[ColorGroupConfig],
    group_index: int
) -> Tuple[MaterialSpec, MaterialSpec]:
    """
    Fill and stroke materials of a colour group. With `sync_colors` the stroke
    mirrors the fill colour and alpha. Unknown indices fall back to group 0.
    """
    if not 0 <= group_index < len(groups):
        group_index = 0
    group = groups[group_index]

    fill = MaterialSpec(color=group.fill.rgb, opacity=group.fill.a)
    stroke_source = group.fill if group.sync_colors else group.stroke
    stroke = MaterialSpec(color=stroke_source.rgb, opacity=stroke_source.a)
    return fill, stroke
