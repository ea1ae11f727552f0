from __future__ import annotations

import pytest
from pydantic import ValidationError

from searchselect.typing.enums import LabelStatus, RelationKind, SelectionMode
from searchselect.typing.models import (
    FilterSpec,
    OptionEntry,
    OptionFormSpec,
    RelationConfig,
    SelectConfig,
    SelectedOption,
    SelectionView,
    normalize_key,
)


def test_normalize_key_accepts_str_and_int() -> None:
    assert normalize_key(7) == "7"
    assert normalize_key("abc") == "abc"


@pytest.mark.parametrize("key", [True, 1.5, None, ["1"]])
def test_normalize_key_rejects_other_types(key) -> None:
    with pytest.raises(ValueError, match="Option keys must be str or int"):
        normalize_key(key)


def test_option_entry_normalizes_integer_key() -> None:
    entry = OptionEntry(key=12, label="Twelve")
    assert entry.key == "12"
    assert entry.disabled is False


def test_option_entry_is_frozen() -> None:
    entry = OptionEntry(key="a", label="A")
    with pytest.raises(ValidationError):
        entry.label = "B"


def test_select_config_defaults() -> None:
    config = SelectConfig()

    assert config.mode == SelectionMode.SINGLE
    assert config.options_limit == 50
    assert config.search_debounce_ms == 1000
    assert config.debounce_seconds == 1.0
    assert config.is_searchable is False
    assert config.search_columns == ()
    assert config.placeholder == "Select an option"


def test_select_config_searchable_columns() -> None:
    config = SelectConfig(searchable=("name", "email"), multiple=True)

    assert config.is_searchable is True
    assert config.search_columns == ("name", "email")
    assert config.mode == SelectionMode.MULTIPLE


@pytest.mark.parametrize(
    "kwargs",
    [{"options_limit": 0}, {"search_debounce_ms": -1}, {"min_items": -1}, {"unknown": True}],
)
def test_select_config_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(ValidationError):
        SelectConfig(**kwargs)


def test_option_form_spec_extract_and_required() -> None:
    form = OptionFormSpec(fields=("name", "email"), required=("name",))

    assert form.extract({"name": "Ada", "email": "ada@example.org", "role": "admin"}) == {
        "name": "Ada",
        "email": "ada@example.org",
    }
    assert form.missing_required({"name": "   "}) == ["name"]
    assert form.missing_required({"name": "Ada"}) == []


def test_relation_config_cardinality() -> None:
    one = RelationConfig(name="author", target="users", title_attribute="name")
    many = RelationConfig(name="tags", target="tags", title_attribute="title", kind=RelationKind.BELONGS_TO_MANY)

    assert one.is_many is False
    assert many.is_many is True


def test_filter_spec_limit_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        FilterSpec(collection="users", limit=0)


def test_selection_view_label_lookup() -> None:
    view = SelectionView(
        mode=SelectionMode.MULTIPLE,
        items=[
            SelectedOption(key="1", label="One"),
            SelectedOption(key="2", status=LabelStatus.PENDING),
        ],
    )

    assert view.keys == ["1", "2"]
    assert view.label_for("1") == "One"
    assert view.label_for("2") is None
    assert view.label_for("3") is None


def test_select_config_normalizes_default_keys() -> None:
    assert SelectConfig(default=3).default == "3"
    assert SelectConfig(default=[1, "b"], multiple=True).default == ["1", "b"]
    assert SelectConfig().default is None


def test_select_config_rejects_boolean_default() -> None:
    with pytest.raises(ValidationError):
        SelectConfig(default=True)
