"""SQL gateway over SQLAlchemy Core.

Tables are reflected from the connected database; the gateway never
creates or alters them.  Each dataset holds a table, a tuple of WHERE
clauses, an optional column projection and ordering.  Writes run in
their own ``engine.begin()`` transaction.

SQLAlchemy Core (not ORM) is used because rows are handed to the
command layer as plain dicts; identity maps would only get in the way.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Self

from sqlalchemy import MetaData, Table, create_engine, delete, event, insert, inspect, select, update
from sqlalchemy.exc import NoSuchTableError

from rommap.adapters.base import Dataset, Gateway, Tuple
from rommap.errors import DatasetNotFoundError

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def create_sql_engine(uri: str, **options: Any) -> Engine:
    """Create an engine for *uri*; SQLite connections get foreign keys enabled."""
    engine = create_engine(uri, echo=False, **options)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class SqlDataset(Dataset):
    """A filtered, projected, ordered view over one reflected table."""

    def __init__(
        self,
        engine: Engine,
        table: Table,
        *,
        clauses: tuple[ColumnElement[bool], ...] = (),
        projection: tuple[str, ...] | None = None,
        ordering: tuple[str, ...] = (),
    ) -> None:
        self._engine = engine
        self.table = table
        self._clauses = clauses
        self._projection = projection
        self._ordering = ordering

    @property
    def header(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.table.columns)

    def _derive(self, **changes: Any) -> Self:
        params: dict[str, Any] = {
            "clauses": self._clauses,
            "projection": self._projection,
            "ordering": self._ordering,
        }
        params.update(changes)
        return type(self)(self._engine, self.table, **params)

    def _select(self) -> Select[Any]:
        if self._projection is None:
            stmt = select(self.table)
        else:
            stmt = select(*(self.table.c[name] for name in self._projection))
        if self._clauses:
            stmt = stmt.where(*self._clauses)
        if self._ordering:
            stmt = stmt.order_by(*(self.table.c[name] for name in self._ordering))
        return stmt

    def __iter__(self) -> Iterator[Tuple]:
        with self._engine.connect() as conn:
            rows = conn.execute(self._select()).mappings().all()
        for row in rows:
            yield dict(row)

    def count(self) -> int:
        return len(self.to_list())

    def restrict(self, criteria: Mapping[str, Any]) -> Self:
        clauses = tuple(self.table.c[name] == value for name, value in criteria.items())
        return self._derive(clauses=(*self._clauses, *clauses))

    def where(self, *clauses: ColumnElement[bool]) -> Self:
        """Add raw SQLAlchemy boolean expressions to the view."""
        return self._derive(clauses=(*self._clauses, *clauses))

    def project(self, *names: str) -> Self:
        return self._derive(projection=names)

    def order(self, *names: str) -> Self:
        return self._derive(ordering=names)

    def insert(self, tuple_: Mapping[str, Any]) -> Tuple:
        values = dict(tuple_)
        with self._engine.begin() as conn:
            result = conn.execute(insert(self.table).values(**values))
            pk = result.inserted_primary_key
        if pk is not None:
            for column, value in zip(self.table.primary_key.columns, pk, strict=False):
                if value is not None:
                    values.setdefault(column.name, value)
        return values

    def update(self, attributes: Mapping[str, Any]) -> list[Tuple]:
        changes = dict(attributes)
        with self._engine.begin() as conn:
            before = [dict(r) for r in conn.execute(self._full_select()).mappings().all()]
            if not before:
                return []
            stmt = update(self.table).values(**changes)
            if self._clauses:
                stmt = stmt.where(*self._clauses)
            conn.execute(stmt)
        return [{**row, **changes} for row in before]

    def delete(self) -> list[Tuple]:
        with self._engine.begin() as conn:
            removed = [dict(r) for r in conn.execute(self._full_select()).mappings().all()]
            stmt = delete(self.table)
            if self._clauses:
                stmt = stmt.where(*self._clauses)
            conn.execute(stmt)
        return removed

    def _full_select(self) -> Select[Any]:
        stmt = select(self.table)
        if self._clauses:
            stmt = stmt.where(*self._clauses)
        return stmt

    def __repr__(self) -> str:
        return f"<SqlDataset table={self.table.name!r}>"


class SqlGateway(Gateway):
    """Gateway over any database SQLAlchemy can connect to."""

    adapter = "sql"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self.uri = engine.url.render_as_string(hide_password=False)
        self._metadata = MetaData()
        self._datasets: dict[str, SqlDataset] = {}

    @classmethod
    def setup(cls, uri: str, **options: Any) -> Self:
        return cls(create_sql_engine(uri, **options))

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine."""
        return self._engine

    def dataset(self, name: str) -> SqlDataset:
        existing = self._datasets.get(name)
        if existing is not None:
            return existing
        try:
            table = Table(name, self._metadata, autoload_with=self._engine)
        except NoSuchTableError as exc:
            msg = f"Table {name!r} does not exist in {self._engine.url!r}"
            raise DatasetNotFoundError(msg) from exc
        logger.debug("Reflected table %s (%d columns)", name, len(table.columns))
        dataset = SqlDataset(self._engine, table)
        self._datasets[name] = dataset
        return dataset

    def has_dataset(self, name: str) -> bool:
        return inspect(self._engine).has_table(name)

    def dataset_names(self) -> list[str]:
        return sorted(inspect(self._engine).get_table_names())

    def disconnect(self) -> None:
        self._datasets.clear()
        self._engine.dispose()
