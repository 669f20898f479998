"""Tests for the factor enumeration and classification."""

import pytest

from aptscore.factors import (
    FACTOR_COUNT,
    Factor,
    FactorClassification,
    FactorType,
    all_factors,
    get_by_display_name,
    get_by_index,
    parse_factor,
)


class TestFactor:
    """Tests for the Factor enum and lookups."""

    def test_fixed_order(self) -> None:
        """Test the 14 factors are in canonical order."""
        assert FACTOR_COUNT == 14
        assert all_factors()[0] is Factor.FLOOR_LEVEL
        assert all_factors()[-1] is Factor.HEATING_SYSTEM
        assert [int(f) for f in Factor] == list(range(14))

    def test_names(self) -> None:
        """Test key and display name."""
        assert Factor.SCHOOL_DISTRICT.key == "school_district"
        assert Factor.SCHOOL_DISTRICT.display_name == "School District"
        assert str(Factor.FLOOR_LEVEL) == "Floor Level"
        assert Factor.CRIME_RATE.description

    def test_lookup_by_index(self) -> None:
        """Test index lookup with bounds."""
        assert get_by_index(8) is Factor.SCHOOL_DISTRICT
        assert get_by_index(14) is None
        assert get_by_index(-1) is None

    def test_lookup_by_display_name(self) -> None:
        """Test display name lookup."""
        assert get_by_display_name("Green Space Ratio") is Factor.GREEN_SPACE_RATIO
        assert get_by_display_name("Unknown") is None

    @pytest.mark.parametrize(
        "value",
        [
            Factor.PARKING,
            11,
            "parking",
            "PARKING",
            "Parking",
            " parking ",
        ],
    )
    def test_parse_factor(self, value: object) -> None:
        """Test every accepted spelling resolves."""
        assert parse_factor(value) is Factor.PARKING  # type: ignore[arg-type]

    def test_parse_multiword(self) -> None:
        """Test display names and dashed keys resolve."""
        assert parse_factor("Distance to Station") is Factor.DISTANCE_TO_STATION
        assert parse_factor("maintenance-fee") is Factor.MAINTENANCE_FEE

    @pytest.mark.parametrize("value", ["basement", 99])
    def test_parse_unknown(self, value: object) -> None:
        """Test unknown factors raise KeyError."""
        with pytest.raises(KeyError):
            parse_factor(value)  # type: ignore[arg-type]


class TestFactorClassification:
    """Tests for the immutable classification value."""

    def test_default_split(self) -> None:
        """Test the default internal/external split."""
        classification = FactorClassification.default()
        internal = classification.factors_of_type(FactorType.INTERNAL)
        external = classification.factors_of_type(FactorType.EXTERNAL)

        assert len(internal) == 8
        assert len(external) == 6
        assert Factor.FLOOR_LEVEL in internal
        assert Factor.HEATING_SYSTEM in internal
        assert Factor.DISTANCE_TO_STATION in external
        assert Factor.GREEN_SPACE_RATIO in external

    def test_mapping_interface(self) -> None:
        """Test the classification behaves as a read-only mapping."""
        classification = FactorClassification.default()
        assert len(classification) == FACTOR_COUNT
        assert list(classification) == list(Factor)
        assert classification[Factor.PARKING] is FactorType.INTERNAL
        assert classification.get_type(Factor.CRIME_RATE) is FactorType.EXTERNAL

    def test_with_type_returns_new_value(self) -> None:
        """Test reclassifying leaves the original untouched."""
        base = FactorClassification.default()
        custom = base.with_type(Factor.PARKING, FactorType.EXTERNAL)

        assert base[Factor.PARKING] is FactorType.INTERNAL
        assert custom[Factor.PARKING] is FactorType.EXTERNAL
        assert custom != base

    def test_equality_and_hash(self) -> None:
        """Test equal classifications compare and hash equal."""
        first = FactorClassification({"parking": "external"})
        second = FactorClassification.default().with_type(
            Factor.PARKING, FactorType.EXTERNAL
        )
        assert first == second
        assert hash(first) == hash(second)
        assert FactorClassification() == FactorClassification.default()

    def test_cannot_mutate(self) -> None:
        """Test item assignment is not supported."""
        classification = FactorClassification.default()
        with pytest.raises(TypeError):
            classification[Factor.PARKING] = FactorType.EXTERNAL  # type: ignore[index]
