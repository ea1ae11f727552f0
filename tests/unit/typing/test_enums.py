import pytest

from searchselect.typing.enums import SearchStatus, SelectionMode, ValidationRule


def test_enum_round_trip() -> None:
    assert SelectionMode.from_str("multiple") is SelectionMode.MULTIPLE
    assert SearchStatus.IN_FLIGHT.to_str() == "in_flight"


def test_enum_rejects_unknown_value() -> None:
    with pytest.raises(ValueError, match="Expected one of: min_items, max_items, placeholder, unknown_option"):
        ValidationRule.from_str("required")
