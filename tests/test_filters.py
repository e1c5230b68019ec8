import pytest

from company_brain.domain.filters import matches_metadata, split_filter
from company_brain.domain.models import ContentType
from company_brain.infrastructure.neo4j.filter_compiler import compile_filters


def test_split_filter_maps_aliases_to_columns():
    columns, metadata = split_filter(
        {"project_id": "p1", "company_id": "t1", "content_type": ContentType.DOCUMENT, "category": "pitch"}
    )
    assert columns == {"scope_id": "p1", "tenant_id": "t1", "content_type": "document"}
    assert metadata == {"category": "pitch"}


def test_split_filter_handles_none():
    assert split_filter(None) == ({}, {})


def test_matches_metadata():
    assert matches_metadata({"category": "pitch", "x": 1}, {"category": "pitch"})
    assert not matches_metadata({"category": "pitch"}, {"category": "memo"})
    assert not matches_metadata({}, {"category": "pitch"})


def test_compile_filters_equality_and_null():
    condition, params = compile_filters({"tenant_id": "t1", "scope_id": None})
    assert condition == "e.tenant_id = $p_0 AND e.scope_id IS NULL"
    assert params == {"p_0": "t1"}


def test_compile_filters_operators():
    condition, params = compile_filters({"content_type__in": ["document"], "content_id__ne": "d1"})
    assert condition == "e.content_type IN $p_0 AND e.content_id <> $p_1"
    assert params == {"p_0": ["document"], "p_1": "d1"}


def test_compile_filters_empty_is_true():
    assert compile_filters({}) == ("true", {})


@pytest.mark.parametrize("filters", [{"content": "x"}, {"metadata": "x"}, {"tenant_id__like": "x"}])
def test_compile_filters_rejects_unknown_fields_and_operators(filters):
    with pytest.raises(ValueError):
        compile_filters(filters)
