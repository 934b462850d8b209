from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from graphnorm.adapters.sqlalchemy import SqlAlchemyRecordSource, records_table
from graphnorm.domain.normalization import normalize
from graphnorm.domain.store import RecordSource, create_record
from tests.helpers.queries import FOO_QUERY, foo_payload, make_record_source, root_selector

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _stored_rows(session: Session) -> dict[str, tuple[str | None, object]]:
    rows = session.execute(select(records_table)).all()
    return {row.data_id: (row.typename, row.fields) for row in rows}


def test_sqlalchemy_source_satisfies_protocol(sqlite_session: Session) -> None:
    assert isinstance(SqlAlchemyRecordSource(sqlite_session), RecordSource)


def test_nothing_is_written_before_flush(sqlite_session: Session) -> None:
    source = SqlAlchemyRecordSource(sqlite_session)
    record = create_record("4", "User")
    record.set_value("name", "Zuck")

    source.set("4", record)

    assert _stored_rows(sqlite_session) == {}
    assert source.get("4") is record

    assert source.flush() == 1
    assert _stored_rows(sqlite_session) == {"4": ("User", {"name": "Zuck"})}


def test_records_are_loaded_once_and_mutations_flushed(sqlite_session: Session) -> None:
    writer = SqlAlchemyRecordSource(sqlite_session)
    writer.set("4", create_record("4", "User"))
    writer.flush()

    reader = SqlAlchemyRecordSource(sqlite_session)
    record = reader.get("4")
    assert record is not None
    assert reader.get("4") is record

    record.set_value("name", "Zuck")
    reader.flush()

    assert _stored_rows(sqlite_session) == {"4": ("User", {"name": "Zuck"})}


def test_removed_records_are_deleted_on_flush(sqlite_session: Session) -> None:
    writer = SqlAlchemyRecordSource(sqlite_session)
    writer.set("4", create_record("4", "User"))
    writer.set("5", create_record("5", "User"))
    writer.flush()

    source = SqlAlchemyRecordSource(sqlite_session)
    source.remove("4")

    assert not source.has("4")
    assert source.get_record_ids() == ("5",)

    source.flush()

    assert set(_stored_rows(sqlite_session)) == {"5"}


def test_normalizing_into_database_matches_in_memory_result(sqlite_session: Session) -> None:
    selector = root_selector(FOO_QUERY, {"id": "1", "size": 32})
    expected_source = make_record_source()
    expected = normalize(expected_source, selector, foo_payload())

    source = SqlAlchemyRecordSource(sqlite_session)
    for data_id, record in make_record_source().records.items():
        source.set(data_id, record)
    result = normalize(source, selector, foo_payload())
    source.flush()

    reloaded = SqlAlchemyRecordSource(sqlite_session)
    assert reloaded.to_json() == expected_source.to_json()
    assert reloaded.size() == expected_source.size()
    assert result == expected
