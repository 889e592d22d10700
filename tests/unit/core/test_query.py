"""Tests for the query builder."""

from __future__ import annotations

import pytest

from elastore.core.query import build_bulk, build_count_body, build_find, build_where, extract_flags
from elastore.store.base.exceptions import ValidationError

# ══════════════════════════════════════════════════════════════════════════════
# Payload skeleton
# ══════════════════════════════════════════════════════════════════════════════


class TestBuildFindBasics:
    def test_empty_spec_has_no_query(self) -> None:
        payload = build_find("users", "user", {})
        assert payload == {"index": "users", "type": "user", "body": {}}

    def test_empty_where_is_dropped(self) -> None:
        payload = build_find("users", "user", {"where": {}, "limit": 5})
        assert payload["body"] == {"size": 5}

    def test_string_spec_is_id_lookup(self) -> None:
        payload = build_find("users", "user", "abc123")
        assert payload["body"]["query"]["ids"]["values"] == ["abc123"]

    def test_numeric_spec_is_id_lookup(self) -> None:
        payload = build_find("users", "user", 42)
        assert payload["body"]["query"] == {"ids": {"values": [42]}}

    def test_none_spec_matches_all(self) -> None:
        payload = build_find("users", "user", None)
        assert "query" not in payload["body"]

    def test_pagination_sort_and_fields(self) -> None:
        payload = build_find(
            "users",
            "user",
            {"limit": 10, "offset": 20, "order": ["age", "desc"], "attributes": ["name"]},
        )
        assert payload["body"] == {
            "size": 10,
            "from": 20,
            "sort": [{"age": {"order": "desc", "unmapped_type": True}}],
            "fields": ["name"],
        }

    def test_unknown_keys_copied_verbatim(self) -> None:
        payload = build_find("users", "user", {"aggs": {"ages": {"terms": {"field": "age"}}}})
        assert payload["body"]["aggs"] == {"ages": {"terms": {"field": "age"}}}

    def test_raw_key_merges_into_body(self) -> None:
        payload = build_find(
            "users",
            "user",
            {"limit": 10, "raw": {"size": 3, "track_total_hits": True}},
        )
        assert payload["body"] == {"size": 3, "track_total_hits": True}

    def test_spec_is_not_mutated(self) -> None:
        spec = {"where": {}, "limit": 1}
        build_find("users", "user", spec)
        assert spec == {"where": {}, "limit": 1}


class TestBuildFindRaw:
    def test_raw_flag_injects_index_and_type(self) -> None:
        spec = {"body": {"query": {"match_all": {}}}, "size": 2}
        payload = build_find("users", "user", spec, raw=True)
        assert payload == {"index": "users", "type": "user", "body": {"query": {"match_all": {}}}, "size": 2}

    def test_raw_flag_requires_mapping(self) -> None:
        with pytest.raises(ValidationError):
            build_find("users", "user", "abc", raw=True)


# ══════════════════════════════════════════════════════════════════════════════
# Where composition
# ══════════════════════════════════════════════════════════════════════════════


class TestWhereSingleFamily:
    def test_range_used_directly(self) -> None:
        payload = build_find("users", "user", {"where": {"range": {"age": {"gte": 18}}}})
        assert payload["body"]["query"] == {"range": {"age": {"gte": 18}}}

    def test_terms_used_directly(self) -> None:
        payload = build_find("users", "user", {"where": {"terms": {"tag": ["a", "b"]}}})
        assert payload["body"]["query"] == {"terms": {"tag": ["a", "b"]}}

    def test_term_used_directly(self) -> None:
        payload = build_find("users", "user", {"where": {"term": {"status": "active"}}})
        assert payload["body"]["query"] == {"term": {"status": "active"}}

    def test_match_used_directly(self) -> None:
        payload = build_find("users", "user", {"where": {"match": {"name": "ada"}}})
        assert payload["body"]["query"] == {"match": {"name": "ada"}}

    def test_flat_where_is_literal_match(self) -> None:
        payload = build_find("users", "user", {"where": {"name": "ada"}})
        assert payload["body"]["query"] == {"match": {"name": "ada"}}

    def test_single_family_is_never_wrapped_in_bool(self) -> None:
        for where in ({"match": {"a": 1}}, {"terms": {"a": [1]}}, {"range": {"a": {"lt": 2}}}):
            assert "bool" not in build_where(where)


class TestWhereComposition:
    def test_match_and_range(self) -> None:
        where = {"match": {"name": "ada"}, "range": {"age": {"gte": 18}}}
        payload = build_find("users", "user", {"where": where})
        assert payload["body"]["query"] == {
            "bool": {"must": [{"match": {"name": "ada"}}, {"range": {"age": {"gte": 18}}}]}
        }

    def test_terms_expanded_per_field(self) -> None:
        where = {"terms": {"a": [1, 2], "b": [3]}, "range": {"age": {"lt": 60}}}
        query = build_where(where)
        assert query == {
            "bool": {
                "must": [
                    {"terms": {"a": [1, 2]}},
                    {"terms": {"b": [3]}},
                    {"range": {"age": {"lt": 60}}},
                ]
            }
        }

    def test_term_counts_as_terms_family(self) -> None:
        query = build_where({"term": {"status": "active"}, "match": {"name": "ada"}})
        assert query == {"bool": {"must": [{"term": {"status": "active"}}, {"match": {"name": "ada"}}]}}

    def test_all_three_families(self) -> None:
        where = {"match": {"name": "ada"}, "terms": {"tag": ["x"]}, "range": {"age": {"gt": 1}}}
        must = build_where(where)["bool"]["must"]
        assert len(must) == 3
        assert {"match": {"name": "ada"}} in must

    def test_other_where_keys_join_the_must_list(self) -> None:
        where = {"match": {"name": "ada"}, "range": {"age": {"gt": 1}}, "exists": {"field": "email"}}
        must = build_where(where)["bool"]["must"]
        assert {"exists": {"field": "email"}} in must

    def test_composed_query_has_no_bare_clauses(self) -> None:
        query = build_where({"match": {"n": "x"}, "terms": {"t": [1]}})
        assert set(query) == {"bool"}


# ══════════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════════


class TestBuildBulk:
    def test_interleaves_actions_and_documents(self) -> None:
        ops = build_bulk("users", "user", [{"name": "a"}, {"name": "b"}])
        assert ops == [
            {"index": {"_index": "users", "_type": "user"}},
            {"name": "a"},
            {"index": {"_index": "users", "_type": "user"}},
            {"name": "b"},
        ]

    def test_single_item_is_wrapped(self) -> None:
        assert len(build_bulk("users", "user", {"name": "a"})) == 2


class TestBuildCountBody:
    def test_keeps_only_query(self) -> None:
        payload = build_find("users", "user", {"where": {"name": "ada"}, "limit": 10, "order": "name"})
        assert build_count_body(payload) == {"query": {"match": {"name": "ada"}}}

    def test_match_all_is_empty(self) -> None:
        assert build_count_body(build_find("users", "user", {"limit": 3})) == {}


class TestExtractFlags:
    def test_flags_removed_from_copy(self) -> None:
        spec = {"where": {"name": "ada"}, "source": True, "id": True}
        cleaned, only_source, include_id = extract_flags(spec)
        assert cleaned == {"where": {"name": "ada"}}
        assert only_source and include_id
        assert "source" in spec

    def test_non_true_flags_are_kept(self) -> None:
        cleaned, only_source, include_id = extract_flags({"id": "abc"})
        assert cleaned == {"id": "abc"}
        assert not only_source and not include_id

    def test_none_becomes_empty_spec(self) -> None:
        assert extract_flags(None) == ({}, False, False)

    def test_scalar_passes_through(self) -> None:
        assert extract_flags("abc") == ("abc", False, False)
