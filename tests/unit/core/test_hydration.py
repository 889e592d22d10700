"""Tests for result hydration."""

from __future__ import annotations

from typing import Any

from elastore.core.hydration import EMPTY_RESPONSE, hydrate_hit, hydrate_list, total_hits


class TestHydrateHit:
    def test_fields_merged_to_top_level(self) -> None:
        hit = {"_id": "1", "_source": {"a": 1}, "fields": {"x": [1]}}
        result = hydrate_hit(hit)
        assert result is not None
        assert result["x"] == [1]
        assert "fields" not in result

    def test_sort_is_stripped(self) -> None:
        result = hydrate_hit({"_id": "1", "_source": {}, "sort": [3]})
        assert result is not None
        assert "sort" not in result

    def test_only_source(self) -> None:
        hit = {"_id": "1", "_source": {"a": 1}, "fields": {"x": [1]}}
        assert hydrate_hit(hit, only_source=True) == {"a": 1}

    def test_only_source_without_source_falls_back_to_hit(self) -> None:
        result = hydrate_hit({"_id": "1", "fields": {"x": [1]}}, only_source=True)
        assert result == {"_id": "1", "x": [1]}

    def test_include_id(self) -> None:
        assert hydrate_hit({"_id": "u1", "_source": {"a": 1}}, only_source=True, include_id=True) == {
            "a": 1,
            "id": "u1",
        }

    def test_input_hit_is_not_mutated(self) -> None:
        hit = {"_id": "1", "_source": {"a": 1}, "fields": {"x": [1]}, "sort": [1]}
        hydrate_hit(hit, include_id=True)
        assert hit == {"_id": "1", "_source": {"a": 1}, "fields": {"x": [1]}, "sort": [1]}

    def test_null_source_is_hydrated_whole(self) -> None:
        result = hydrate_hit({"_id": "1", "_source": None, "sort": [3]}, only_source=True, include_id=True)
        assert result == {"_id": "1", "_source": None, "id": "1"}

    def test_malformed_hit_returns_none(self) -> None:
        assert hydrate_hit(None) is None
        assert hydrate_hit({"_id": "1", "fields": ["not", "a", "mapping"]}) is None


class TestTotalHits:
    def test_integer_total(self) -> None:
        assert total_hits({"total": 47}) == 47

    def test_object_total(self) -> None:
        assert total_hits({"total": {"value": 12, "relation": "eq"}}) == 12

    def test_missing_total(self) -> None:
        assert total_hits({}) == 0


class TestHydrateList:
    def test_results_and_counts(self, search_response: dict[str, Any]) -> None:
        rs = hydrate_list(search_response, include_id=True)
        assert [doc["id"] for doc in rs.result] == ["u1", "u2"]
        assert rs.meta.total_count == 2
        assert rs.meta.current_count == 2
        assert rs.meta.page_count is None
        assert rs.meta.current_page is None

    def test_pagination_metadata(self) -> None:
        response = {"hits": {"total": 47, "hits": [{"_id": str(i), "_source": {}} for i in range(10)]}}
        payload = {"body": {"size": 10, "from": 20}}
        rs = hydrate_list(response, payload=payload)
        assert rs.meta.page_count == 5
        assert rs.meta.current_page == 3
        assert rs.meta.current_count == 10

    def test_page_count_without_offset(self) -> None:
        rs = hydrate_list({"hits": {"total": 21, "hits": []}}, payload={"body": {"size": 10}})
        assert rs.meta.page_count == 3
        assert rs.meta.current_page is None

    def test_first_page_offset_zero(self) -> None:
        rs = hydrate_list({"hits": {"total": 5, "hits": []}}, payload={"body": {"size": 2, "from": 0}})
        assert rs.meta.current_page == 1

    def test_malformed_hits_are_skipped(self) -> None:
        response = {"hits": {"total": 3, "hits": [{"_id": "1", "_source": {}}, None, {"_id": "3", "fields": 5}]}}
        rs = hydrate_list(response)
        assert rs.meta.total_count == 3
        assert rs.meta.current_count == 1

    def test_null_source_hit_is_counted(self) -> None:
        response = {"hits": {"total": 2, "hits": [{"_id": "1", "_source": {"a": 1}}, {"_id": "2", "_source": None}]}}
        rs = hydrate_list(response, only_source=True, include_id=True)
        assert rs.meta.current_count == 2
        assert rs.result[0] == {"a": 1, "id": "1"}
        assert rs.result[1]["id"] == "2"

    def test_empty_response(self) -> None:
        rs = hydrate_list(EMPTY_RESPONSE, payload={"body": {"size": 10}})
        assert rs.result == []
        assert rs.meta.total_count == 0
        assert rs.meta.page_count == 0

    def test_to_dict_omits_unset_pagination(self) -> None:
        rs = hydrate_list({"hits": {"total": 1, "hits": [{"_id": "1", "_source": {"a": 1}}]}}, only_source=True)
        assert rs.to_dict() == {"result": [{"a": 1}], "meta": {"total_count": 1, "current_count": 1}}
