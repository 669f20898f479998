"""The fixed 14-factor scoring domain.

Every score and weight set is keyed by ``Factor``. Factors are also
classified as *internal* (a property of the unit itself) or *external* (a
property of its surroundings). The classification is an immutable value,
``FactorClassification``; code that needs it takes one as an argument, so
concurrent scoring never shares mutable state.
"""

from collections.abc import Iterator, Mapping
from enum import Enum, IntEnum
from types import MappingProxyType


class FactorType(str, Enum):
    """Whether a factor describes the unit or its surroundings."""

    INTERNAL = "internal"
    EXTERNAL = "external"


class Factor(IntEnum):
    """Scoring dimensions, in canonical iteration order."""

    FLOOR_LEVEL = 0
    DISTANCE_TO_STATION = 1
    ELEVATOR_PRESENCE = 2
    CONSTRUCTION_YEAR = 3
    CONSTRUCTION_COMPANY = 4
    APARTMENT_SIZE = 5
    NEARBY_AMENITIES = 6
    TRANSPORTATION_ACCESS = 7
    SCHOOL_DISTRICT = 8
    CRIME_RATE = 9
    GREEN_SPACE_RATIO = 10
    PARKING = 11
    MAINTENANCE_FEE = 12
    HEATING_SYSTEM = 13

    @property
    def key(self) -> str:
        """Snake-case identifier used in files and JSON output."""
        return self.name.lower()

    @property
    def display_name(self) -> str:
        """Human-readable English name."""
        return _FACTOR_INFO[self][0]

    @property
    def description(self) -> str:
        """What a high score for this factor means."""
        return _FACTOR_INFO[self][1]

    def __str__(self) -> str:
        return self.display_name


FACTOR_COUNT = len(Factor)

_FACTOR_INFO: dict[Factor, tuple[str, str]] = {
    Factor.FLOOR_LEVEL: (
        "Floor Level",
        "Floor of the unit; floors near the middle of the building score higher",
    ),
    Factor.DISTANCE_TO_STATION: (
        "Distance to Station",
        "Distance to the nearest station; closer scores higher",
    ),
    Factor.ELEVATOR_PRESENCE: (
        "Elevator Presence",
        "Whether the building has an elevator",
    ),
    Factor.CONSTRUCTION_YEAR: (
        "Construction Year",
        "Year of construction; newer buildings score higher",
    ),
    Factor.CONSTRUCTION_COMPANY: (
        "Construction Company",
        "Track record of the builder",
    ),
    Factor.APARTMENT_SIZE: (
        "Apartment Size",
        "Floor area relative to a comfortable size",
    ),
    Factor.NEARBY_AMENITIES: (
        "Nearby Amenities",
        "Shops, clinics and services within walking distance",
    ),
    Factor.TRANSPORTATION_ACCESS: (
        "Transportation Access",
        "Public transport coverage around the building",
    ),
    Factor.SCHOOL_DISTRICT: (
        "School District",
        "Quality of the local school district",
    ),
    Factor.CRIME_RATE: (
        "Crime Rate",
        "Local crime rate; lower crime scores higher",
    ),
    Factor.GREEN_SPACE_RATIO: (
        "Green Space Ratio",
        "Share of parks and green space nearby",
    ),
    Factor.PARKING: (
        "Parking",
        "Parking spaces per household",
    ),
    Factor.MAINTENANCE_FEE: (
        "Maintenance Fee",
        "Monthly maintenance fee; reasonable fees score higher",
    ),
    Factor.HEATING_SYSTEM: (
        "Heating System",
        "Efficiency of the heating system",
    ),
}


def all_factors() -> tuple[Factor, ...]:
    """Return every factor in canonical order."""
    return tuple(Factor)


def get_by_index(index: int) -> Factor | None:
    """Return the factor at ``index`` or None if out of range."""
    if 0 <= index < FACTOR_COUNT:
        return Factor(index)
    return None


def get_by_display_name(name: str) -> Factor | None:
    """Return the factor with the given English display name."""
    for factor in Factor:
        if factor.display_name == name:
            return factor
    return None


def parse_factor(value: "Factor | int | str") -> Factor:
    """Resolve a factor from an enum member, index, key or display name.

    Raises:
        KeyError: If the value does not name a factor.
    """
    if isinstance(value, Factor):
        return value
    if isinstance(value, int):
        factor = get_by_index(value)
        if factor is None:
            raise KeyError(f"Unknown factor index: {value}")
        return factor

    text = value.strip()
    key = text.lower().replace(" ", "_").replace("-", "_")
    if key.upper() in Factor.__members__:
        return Factor[key.upper()]
    factor = get_by_display_name(text)
    if factor is None:
        raise KeyError(f"Unknown factor: {value}")
    return factor


_DEFAULT_TYPES: dict[Factor, FactorType] = {
    Factor.FLOOR_LEVEL: FactorType.INTERNAL,
    Factor.DISTANCE_TO_STATION: FactorType.EXTERNAL,
    Factor.ELEVATOR_PRESENCE: FactorType.INTERNAL,
    Factor.CONSTRUCTION_YEAR: FactorType.INTERNAL,
    Factor.CONSTRUCTION_COMPANY: FactorType.INTERNAL,
    Factor.APARTMENT_SIZE: FactorType.INTERNAL,
    Factor.NEARBY_AMENITIES: FactorType.EXTERNAL,
    Factor.TRANSPORTATION_ACCESS: FactorType.EXTERNAL,
    Factor.SCHOOL_DISTRICT: FactorType.EXTERNAL,
    Factor.CRIME_RATE: FactorType.EXTERNAL,
    Factor.GREEN_SPACE_RATIO: FactorType.EXTERNAL,
    Factor.PARKING: FactorType.INTERNAL,
    Factor.MAINTENANCE_FEE: FactorType.INTERNAL,
    Factor.HEATING_SYSTEM: FactorType.INTERNAL,
}


class FactorClassification(Mapping[Factor, FactorType]):
    """Immutable internal/external classification of all factors.

    Changing a classification returns a new value; the original is never
    modified, so a classification can be shared across threads freely.

    Example:
        >>> base = FactorClassification.default()
        >>> custom = base.with_type(Factor.PARKING, FactorType.EXTERNAL)
        >>> base[Factor.PARKING], custom[Factor.PARKING]
        (<FactorType.INTERNAL: 'internal'>, <FactorType.EXTERNAL: 'external'>)
    """

    __slots__ = ("_types",)

    def __init__(self, types: Mapping[Factor, FactorType] | None = None) -> None:
        merged = dict(_DEFAULT_TYPES)
        if types:
            for factor, factor_type in types.items():
                merged[parse_factor(factor)] = FactorType(factor_type)
        self._types = MappingProxyType(merged)

    @classmethod
    def default(cls) -> "FactorClassification":
        """Return the built-in classification."""
        return _DEFAULT_CLASSIFICATION

    def __getitem__(self, factor: Factor) -> FactorType:
        return self._types[factor]

    def __iter__(self) -> Iterator[Factor]:
        return iter(Factor)

    def __len__(self) -> int:
        return FACTOR_COUNT

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FactorClassification):
            return dict(self._types) == dict(other._types)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._types[f] for f in Factor))

    def __repr__(self) -> str:
        external = [f.key for f in self.factors_of_type(FactorType.EXTERNAL)]
        return f"FactorClassification(external={external})"

    def get_type(self, factor: Factor) -> FactorType:
        """Return the classification of ``factor``."""
        return self._types[factor]

    def with_type(
        self, factor: Factor, factor_type: FactorType
    ) -> "FactorClassification":
        """Return a copy with ``factor`` reclassified."""
        return FactorClassification({**self._types, factor: factor_type})

    def factors_of_type(self, factor_type: FactorType) -> list[Factor]:
        """Return factors of the given type, in canonical order."""
        return [f for f in Factor if self._types[f] == factor_type]


_DEFAULT_CLASSIFICATION = FactorClassification()
