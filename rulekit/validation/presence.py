"""Presence Verification

`exists:<collection>[,<column>]` passes when the value is present in a
stored collection. The lookup itself goes through a PresenceVerifier
handed to the Validator; the default one queries a SQLAlchemy engine.

Usage:
    engine = create_engine("sqlite:///app.db")
    validator = Validator(
        {"country": "required|exists:countries,code"},
        presence_verifier=SqlAlchemyPresenceVerifier(engine),
    )
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

from sqlalchemy import MetaData, Table, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from rulekit.errors import AppErrorException, query_failed
from rulekit.logging import db_logger, validation_logger
from .errors import MissingCollaboratorError, MissingParameterError

if TYPE_CHECKING:
    from .context import EvaluationContext

log = validation_logger()
db_log = db_logger()


@runtime_checkable
class PresenceVerifier(Protocol):
    """Counts stored rows whose `column` matches."""

    def count(self, collection: str, column: str, value: Any) -> int: ...

    def count_many(self, collection: str, column: str, values: Sequence[Any]) -> int: ...


class SqlAlchemyPresenceVerifier:
    """PresenceVerifier over reflected tables of a SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._metadata = MetaData()
        self._tables: dict[str, Table] = {}

    def _table(self, collection: str) -> Table:
        if collection not in self._tables:
            self._tables[collection] = Table(collection, self._metadata, autoload_with=self.engine)
        return self._tables[collection]

    def _scalar_count(self, collection: str, column: str, condition) -> int:
        try:
            table = self._table(collection)
            stmt = select(func.count()).select_from(table).where(condition(table.c[column]))
            with self.engine.connect() as conn:
                total = conn.execute(stmt).scalar_one()
        except (SQLAlchemyError, KeyError) as e:
            db_log.error("presence_query_failed", collection=collection, column=column, error=str(e))
            raise AppErrorException(query_failed(collection, e, origin="presence").unwrap_err()) from e
        db_log.debug("presence_query", collection=collection, column=column, count=total)
        return total

    def count(self, collection: str, column: str, value: Any) -> int:
        return self._scalar_count(collection, column, lambda c: c == value)

    def count_many(self, collection: str, column: str, values: Sequence[Any]) -> int:
        return self._scalar_count(collection, column, lambda c: c.in_(list(values)))


def exists(field: str, value: Any, params: Sequence[str], context: EvaluationContext) -> bool:
    if not params:
        raise MissingParameterError("Rule 'exists' requires a collection name", rule="exists")
    verifier = context.validator.presence_verifier
    if verifier is None:
        log.warning("missing_presence_verifier", field=field)
        raise MissingCollaboratorError("Rule 'exists' needs a presence verifier", rule="exists", field=field)

    collection = params[0]
    column = params[1] if len(params) > 1 and params[1] else field
    if isinstance(value, (list, tuple)):
        distinct = list(dict.fromkeys(value))
        return bool(distinct) and verifier.count_many(collection, column, distinct) >= len(distinct)
    return verifier.count(collection, column, value) > 0
