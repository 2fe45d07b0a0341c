"""Defines the unit types, their stats and how many of each a player gets"""

from dataclasses import dataclass
from typing import Self

from fogline.core.shared_types import EdgeType, UnitKind


@dataclass(frozen=True)
class UnitStats:
    name: str
    attack: int
    defense: int
    quantity: int
    traversable: frozenset[EdgeType]


ALL_TERRAIN = frozenset(EdgeType)
PLAINS_ONLY = frozenset({EdgeType.PLAINS})

# Insertion order is the order the pool is built in (before shuffling)
UNIT_STATS: dict[UnitKind, UnitStats] = {
    UnitKind.MOBILE_COMMAND: UnitStats("Mobile Command", 1, 2, 1, PLAINS_ONLY),
    UnitKind.TANK: UnitStats("Tank", 4, 4, 2, PLAINS_ONLY),
    UnitKind.INFANTRY: UnitStats("Infantry", 3, 3, 3, ALL_TERRAIN),
    UnitKind.ARTILLERY: UnitStats("Artillery", 5, 1, 1, PLAINS_ONLY),
    UnitKind.SPECIAL_OPS: UnitStats("Special Ops", 3, 1, 1, ALL_TERRAIN),
}

UNITS_PER_PLAYER = sum(stats.quantity for stats in UNIT_STATS.values())


@dataclass(frozen=True)
class UnitInstance:
    kind: UnitKind
    instance: int
    attack: int
    defense: int
    traversable: frozenset[EdgeType]

    @classmethod
    def create(cls, kind: UnitKind, instance: int) -> Self:
        """Build a unit with the catalog stats of its kind"""
        stats = UNIT_STATS[kind]
        return cls(kind, instance, stats.attack, stats.defense, stats.traversable)

    @property
    def unit_id(self) -> str:
        """Unique within one player's pool: 'tank-2', 'infantry-1', ..."""
        return f"{self.kind.value}-{self.instance}"

    @property
    def name(self) -> str:
        return UNIT_STATS[self.kind].name

    @property
    def is_command(self) -> bool:
        return self.kind == UnitKind.MOBILE_COMMAND

    def matches_catalog(self) -> bool:
        """A unit received from the opponent must carry exactly the stats of its kind"""
        return self == UnitInstance.create(self.kind, self.instance) and (
            1 <= self.instance <= UNIT_STATS[self.kind].quantity
        )


def can_traverse(unit: UnitInstance, edge: EdgeType) -> bool:
    return edge in unit.traversable


def full_unit_set() -> list[UnitInstance]:
    """The 8 units every player starts with, in catalog order"""
    return [
        UnitInstance.create(kind, instance)
        for kind, stats in UNIT_STATS.items()
        for instance in range(1, stats.quantity + 1)
    ]
