#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import contextlib
import copy
import datetime
import uuid
from typing import Any, Callable, Iterator, Self, cast

import polars as pl
from polars.exceptions import NoDataError

from sessiongrid.storage.database_schemas import DATABASE_SCHEMAS, DatabaseNamespace

IdFactory = Callable[[], str]
Clock = Callable[[], datetime.datetime]


def _uuid4() -> str:
    return str(uuid.uuid4())


class StorageContext:
    """In-memory record store backing the booking application.

    Each StorageContext object is a full encapsulation of the stored state. It

    1. Contains one database per namespace (sessions, trainers, ...), so that
    services can read and write records without threading state through
    function arguments.
    2. Owns the capabilities used to stamp new records: an id factory and a
    clock. Both can be injected to make record identity deterministic.

    One should instantiate this class as a global variable
    for all services to access without taking StorageContext as function argument
    """

    dbs_schemas: dict[DatabaseNamespace, dict[str, Any]] = DATABASE_SCHEMAS

    def __init__(
        self,
        id_factory: IdFactory | None = None,
        clock: Clock | None = None,
    ):
        self._id_factory = id_factory or _uuid4
        self._clock = clock or datetime.datetime.now
        self._dbs: dict[DatabaseNamespace, pl.DataFrame] = {
            namespace: pl.DataFrame(schema=self.dbs_schemas[namespace])
            for namespace in self.dbs_schemas
        }

    def new_id(self) -> str:
        return self._id_factory()

    def now(self) -> datetime.datetime:
        return self._clock()

    def to_dict(self) -> dict[str, Any]:
        """Serializes to a dictionary

        We aim to make this serialization reversible, while still somewhat readable.

        Returns:
            A serialized dict.
        """

        def convert_datetime(value: Any) -> Any:
            if isinstance(value, (datetime.date, datetime.datetime)):
                return value.isoformat()
            return value

        return {
            "_dbs": {
                str(namespace): [
                    {k: convert_datetime(v) for k, v in record.items()}
                    for record in database.to_dicts()
                ]
                for namespace, database in self._dbs.items()
            },
        }

    @classmethod
    def from_dict(cls, serialized_dict: dict[str, Any], **kwargs: Any) -> Self:
        """Load a serialized dict produced by to_dict.

        Args:
            serialized_dict:    Serialized dict object.
            kwargs:             Forwarded to the constructor (eg `id_factory`).

        Returns:
            StorageContext object.
        """

        def convert_datetime(value, schema: dict[str, Any], key: str):
            if schema[key] is pl.Datetime:
                return datetime.datetime.fromisoformat(value) if value else None
            if schema[key] is pl.Date:
                return datetime.date.fromisoformat(value) if value else None
            return value

        storage_context = cls(**kwargs)
        for namespace_name, records in serialized_dict["_dbs"].items():
            namespace = DatabaseNamespace(namespace_name)
            schema = cls.dbs_schemas[namespace]
            records = [
                {k: convert_datetime(v, schema, k) for k, v in record.items()}
                for record in records
            ]
            storage_context._dbs[namespace] = pl.DataFrame(records, schema=schema)
        return storage_context

    def get_database(self, namespace: DatabaseNamespace) -> pl.DataFrame:
        """Get a database given the namespace

        Note that the database returned is a subview of the original database.
        Please treat it as an immutable object to avoid unintended effect.
        Use add / update / remove functions to modify database if needed.
        """
        return self._dbs[namespace]

    def _check_columns(self, namespace: DatabaseNamespace, column_names: set[str]):
        schema_column_names = set(self.dbs_schemas[namespace].keys())
        if column_names - schema_column_names:
            raise KeyError(
                f"Only column names {schema_column_names} are allowed for namespace {namespace}. "
                f"Found unknown column name {column_names - schema_column_names}"
            )

    def add_to_database(
        self,
        namespace: DatabaseNamespace,
        rows: list[dict[str, Any]],
    ) -> None:
        """Add multiple rows to a database.

        Parameters
        ----------
        namespace
            Database namespace
        rows
            List of rows to be added, each item should be a Dict of column and value.
            Columns missing from a row are stored as null.

        Raises
        ------
        KeyError:   When provided column names in rows does not match given schema
        """
        schema = self.dbs_schemas[namespace]
        self._check_columns(namespace, {x for row in rows for x in row.keys()})
        rows = [{k: row.get(k) for k in schema} for row in copy.deepcopy(rows)]
        self._dbs[namespace] = self._dbs[namespace].vstack(
            pl.DataFrame(rows, schema=schema)
        )

    def update_database(
        self,
        namespace: DatabaseNamespace,
        predicate: pl.Expr,
        values: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Overwrite `values` in every row matching `predicate`.

        Returns
        -------
            The updated rows.

        Raises
        ------
        NoDataError: If no matching rows where found
        KeyError: When `values` refers to columns outside the namespace schema
        """
        self._check_columns(namespace, set(values))
        database = self._dbs[namespace]
        matches = database.select(predicate.fill_null(False)).to_series().to_list()
        if not any(matches):
            raise NoDataError(f"No db entry matching {predicate=} found")
        records = database.to_dicts()
        updated = []
        for record, is_match in zip(records, matches):
            if is_match:
                record.update(copy.deepcopy(values))
                updated.append(record)
        self._dbs[namespace] = pl.DataFrame(
            records, schema=self.dbs_schemas[namespace]
        )
        return updated

    def remove_from_database(
        self,
        namespace: DatabaseNamespace,
        predicate: pl.Expr,
    ) -> None:
        """Remove multiple rows from a database.

        Raises
        ------
        NoDataError: If no matching rows where found
        """
        database = self._dbs[namespace]
        if database.filter(predicate).is_empty():
            raise NoDataError(f"No db entry matching {predicate=} found")
        self._dbs[namespace] = database.filter(~predicate.fill_null(False))


def _create_global_storage_context() -> StorageContext:
    """Lazily set up the global storage context."""
    storage_context = StorageContext()
    globals()["_global_storage_context"] = storage_context
    return storage_context


def get_current_context() -> StorageContext:
    """Getter for global storage context variable"""
    # Checking globals() instead of `global` keeps this working when tests
    # run in separate processes with pytest-xdist.
    global_storage_context = globals().get("_global_storage_context")
    if global_storage_context is None:
        return _create_global_storage_context()

    return cast(StorageContext, global_storage_context)


def set_current_context(storage_context: StorageContext) -> None:
    """Setter for global storage context variable"""
    globals()["_global_storage_context"] = storage_context


@contextlib.contextmanager
def new_context(context: StorageContext) -> Iterator[StorageContext]:
    """Handy context manager which patches the global storage context with
    `context`, and reverts after context exit"""
    original_context = get_current_context()
    try:
        set_current_context(context)
        yield context
    # Release resource even when exceptions are raised
    finally:
        # Reset original context
        set_current_context(original_context)
