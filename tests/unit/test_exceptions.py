from searchselect.exceptions import (
    AsyncExecutionError,
    ConfigurationError,
    LabelResolutionError,
    PackageError,
    SearchFailedError,
    SettingsError,
    TransportError,
    ValidationFailedError,
)
from searchselect.typing.enums import ValidationRule
from searchselect.typing.models import ValidationViolation


def test_root_exception_hierarchy() -> None:
    assert issubclass(SettingsError, PackageError)
    assert issubclass(AsyncExecutionError, PackageError)
    assert issubclass(ConfigurationError, PackageError)
    assert issubclass(TransportError, PackageError)


def test_search_failed_message_includes_query_and_cause() -> None:
    error = SearchFailedError(query="ali", cause=RuntimeError("boom"))
    assert str(error) == "Search failed for query 'ali': boom"


def test_label_resolution_message_lists_keys() -> None:
    error = LabelResolutionError(keys=("1", "2"))
    assert str(error) == "Label resolution failed for keys: 1, 2"


def test_validation_failed_exposes_rules() -> None:
    error = ValidationFailedError(
        violations=[ValidationViolation(rule=ValidationRule.MIN_ITEMS, message="Select at least 1 item(s)")],
    )
    assert error.rules == ["min_items"]
    assert "at least 1" in str(error)
