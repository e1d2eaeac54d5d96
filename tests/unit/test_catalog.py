"""Unit tests for the category dimension catalog."""

import pytest
from services.scoring_service.catalog import (
    DIMENSION_LABELS,
    all_labels,
    labels_for,
    resolve_category,
)
from services.scoring_service.errors import UnknownCategory
from services.scoring_service.models import ProgramCategory


@pytest.mark.unit
@pytest.mark.parametrize("category", list(ProgramCategory))
def test_every_category_has_seven_labels(category):
    labels = labels_for(category)

    assert isinstance(labels, tuple)
    assert len(labels) == 7
    assert len(set(labels)) == 7


@pytest.mark.unit
def test_labels_accept_wire_value():
    assert labels_for("learn_to_swim") == labels_for(ProgramCategory.LEARN_TO_SWIM)
    assert labels_for("learn_to_swim")[0] == "Age Group Complexity"


@pytest.mark.unit
def test_labels_are_stable_across_calls():
    assert labels_for(ProgramCategory.INSTITUTIONAL) == labels_for(
        ProgramCategory.INSTITUTIONAL
    )


@pytest.mark.unit
@pytest.mark.parametrize("value", ["LEARN_TO_SWIM", "swimming", "", None, 3])
def test_unknown_category_is_rejected(value):
    with pytest.raises(UnknownCategory) as exc:
        labels_for(value)

    assert exc.value.status_code == 422
    assert exc.value.code == "unknown_category"


@pytest.mark.unit
def test_resolve_category_returns_enum_unchanged():
    assert resolve_category(ProgramCategory.CERTIFICATIONS) is ProgramCategory.CERTIFICATIONS


@pytest.mark.unit
def test_all_labels_is_a_copy_of_the_full_table():
    table = all_labels()

    assert set(table) == set(ProgramCategory)
    table.pop(ProgramCategory.LEARN_TO_SWIM)
    assert ProgramCategory.LEARN_TO_SWIM in DIMENSION_LABELS


@pytest.mark.unit
def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        DIMENSION_LABELS[ProgramCategory.LEARN_TO_SWIM] = ("x",) * 7
