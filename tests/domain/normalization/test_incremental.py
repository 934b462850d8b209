from __future__ import annotations

import pytest

from graphnorm.domain.ast import Defer, Stream, Variable
from graphnorm.domain.normalization import (
    IncrementalKind,
    InvalidConditionError,
    evaluate_condition,
    normalize,
)
from tests.helpers.queries import (
    DEFER_IN_PLURAL_QUERY,
    STREAM_IN_PLURAL_QUERY,
    defer_query,
    make_record_source,
    root_record_json,
    root_selector,
    stream_query,
)

ALICE = {"id": "1", "__typename": "User", "name": "Alice"}


def _feedback_payload(*actors: dict[str, object]) -> dict[str, object]:
    return {"node": {"id": "1", "__typename": "Feedback", "actors": list(actors)}}


def test_evaluate_condition_accepts_literals_and_boolean_variables() -> None:
    assert evaluate_condition(True, {}, label="x") is True
    assert evaluate_condition(False, {}, label="x") is False
    assert evaluate_condition(Variable("on"), {"on": True}, label="x") is True
    assert evaluate_condition(Variable("on"), {"on": False}, label="x") is False


@pytest.mark.parametrize("variables", [{}, {"on": "yes"}, {"on": None}])
def test_evaluate_condition_rejects_non_boolean_variables(variables: dict[str, object]) -> None:
    with pytest.raises(InvalidConditionError, match="`on`"):
        evaluate_condition(Variable("on"), variables, label="x")  # type: ignore[arg-type]


@pytest.mark.parametrize("condition", [False, Variable("enableDefer")])
def test_defer_disabled_normalizes_inline(condition: bool | Variable) -> None:
    source = make_record_source()

    result = normalize(
        source,
        root_selector(defer_query(condition), {"id": "1", "enableDefer": False}),
        {"node": dict(ALICE)},
    )

    assert result.incremental_placeholders == []
    assert source.to_json() == {
        "1": {"__id": "1", "__typename": "User", "id": "1", "name": "Alice"},
        "client:root": root_record_json(),
    }


@pytest.mark.parametrize("condition", [True, Variable("enableDefer")])
def test_defer_enabled_skips_fragment_and_returns_placeholder(
    condition: bool | Variable,
) -> None:
    source = make_record_source()
    query = defer_query(condition)
    variables = {"id": "1", "enableDefer": True}

    result = normalize(source, root_selector(query, variables), {"node": dict(ALICE)})

    assert len(result.incremental_placeholders) == 1
    placeholder = result.incremental_placeholders[0]
    assert placeholder.kind is IncrementalKind.DEFER
    assert placeholder.label == "Query$defer$TestFragment"
    assert placeholder.path == ("node",)
    assert placeholder.type_name == "User"
    assert placeholder.selector.data_id == "1"
    assert placeholder.selector.variables == variables
    assert isinstance(placeholder.selector.node, Defer)
    # name is in the payload but belongs to the deferred fragment
    assert source.to_json() == {
        "1": {"__id": "1", "__typename": "User", "id": "1"},
        "client:root": root_record_json(),
    }


def test_deferred_selector_completes_the_record_later() -> None:
    source = make_record_source()
    result = normalize(
        source, root_selector(defer_query(True), {"id": "1"}), {"node": dict(ALICE)}
    )
    placeholder = result.incremental_placeholders[0]

    follow_up = normalize(
        source,
        placeholder.selector,
        dict(ALICE),
        parent_path=placeholder.path,
    )

    assert follow_up.incremental_placeholders == []
    assert source.to_json()["1"]["name"] == "Alice"


def test_defer_within_plural_emits_one_placeholder_per_record() -> None:
    source = make_record_source()
    payload = _feedback_payload(
        {"__typename": "User", "id": "2", "name": "Alice"},
        {"__typename": "User", "id": "3", "name": "Bob"},
    )

    result = normalize(source, root_selector(DEFER_IN_PLURAL_QUERY, {"id": "1"}), payload)

    assert [
        (p.kind, p.path, p.selector.data_id, p.type_name) for p in result.incremental_placeholders
    ] == [
        (IncrementalKind.DEFER, ("node", "actors", "0"), "2", "User"),
        (IncrementalKind.DEFER, ("node", "actors", "1"), "3", "User"),
    ]
    assert source.to_json() == {
        "1": {"__id": "1", "__typename": "Feedback", "id": "1", "actors": {"__refs": ["2", "3"]}},
        "2": {"__id": "2", "__typename": "User", "id": "2"},
        "3": {"__id": "3", "__typename": "User", "id": "3"},
        "client:root": root_record_json(),
    }


def test_defer_paths_are_prefixed_with_parent_path() -> None:
    source = make_record_source()

    result = normalize(
        source,
        root_selector(defer_query(True), {"id": "1"}),
        {"node": {"id": "1", "__typename": "User"}},
        parent_path=["abc", "0", "xyz"],
    )

    assert [p.path for p in result.incremental_placeholders] == [("abc", "0", "xyz", "node")]


def _streamed_store() -> dict[str, object]:
    return {
        "1": {"__id": "1", "__typename": "Feedback", "id": "1", "actors": {"__refs": ["2"]}},
        "2": {"__id": "2", "__typename": "User", "id": "2", "name": "Alice"},
        "client:root": root_record_json(),
    }


@pytest.mark.parametrize("condition", [False, Variable("enableStream")])
def test_stream_disabled_normalizes_eagerly_without_placeholders(
    condition: bool | Variable,
) -> None:
    source = make_record_source()

    result = normalize(
        source,
        root_selector(stream_query(condition), {"id": "1", "enableStream": False}),
        _feedback_payload({"__typename": "User", "id": "2", "name": "Alice"}),
    )

    assert result.incremental_placeholders == []
    assert source.to_json() == _streamed_store()


@pytest.mark.parametrize("condition", [True, Variable("enableStream")])
def test_stream_enabled_normalizes_eagerly_and_returns_placeholder(
    condition: bool | Variable,
) -> None:
    source = make_record_source()
    variables = {"id": "1", "enableStream": True}

    result = normalize(
        source,
        root_selector(stream_query(condition), variables),
        _feedback_payload({"__typename": "User", "id": "2", "name": "Alice"}),
    )

    assert source.to_json() == _streamed_store()
    assert len(result.incremental_placeholders) == 1
    placeholder = result.incremental_placeholders[0]
    assert placeholder.kind is IncrementalKind.STREAM
    assert placeholder.label == "TestFragment$stream$actors"
    assert placeholder.path == ("node",)
    assert placeholder.type_name == "Feedback"
    assert placeholder.selector.data_id == "1"
    assert placeholder.selector.variables == variables
    assert isinstance(placeholder.selector.node, Stream)


def test_stream_within_plural_emits_one_placeholder_per_owning_record() -> None:
    source = make_record_source()
    payload = _feedback_payload(
        {"__typename": "User", "id": "2", "name": "Alice", "actors": []},
        {"__typename": "User", "id": "3", "name": "Bob", "actors": []},
    )

    result = normalize(source, root_selector(STREAM_IN_PLURAL_QUERY, {"id": "1"}), payload)

    assert [
        (p.kind, p.path, p.selector.data_id, p.type_name) for p in result.incremental_placeholders
    ] == [
        (IncrementalKind.STREAM, ("node", "actors", "0"), "2", "User"),
        (IncrementalKind.STREAM, ("node", "actors", "1"), "3", "User"),
    ]
    records = source.to_json()
    assert records["2"] == {
        "__id": "2",
        "__typename": "User",
        "id": "2",
        "name": "Alice",
        "actors": {"__refs": []},
    }
    assert records["3"]["actors"] == {"__refs": []}


def test_stream_paths_are_prefixed_with_parent_path() -> None:
    source = make_record_source()

    result = normalize(
        source,
        root_selector(stream_query(True), {"id": "1"}),
        _feedback_payload({"__typename": "User", "id": "2", "name": "Alice"}),
        parent_path=("abc", "0", "xyz"),
    )

    assert [p.path for p in result.incremental_placeholders] == [("abc", "0", "xyz", "node")]


def test_defer_condition_bound_to_non_boolean_aborts() -> None:
    source = make_record_source()

    with pytest.raises(InvalidConditionError):
        normalize(
            source,
            root_selector(defer_query(Variable("enableDefer")), {"id": "1"}),
            {"node": dict(ALICE)},
        )
