"""
Table-level data store adapter.

Each of the four tables (products, seamstresses, orders, fabrics) is written
through a TableStore: insert, update-by-id, delete-by-id and
select-all-with-ordering. Every call is atomic on its own; nothing here spans
tables.

Models may declare ``optional_columns``: fields that an older database
schema might not have yet. When a write fails because one of those columns
is missing, the store retries the same write once without it and reports the
dropped field names so the caller can warn the user.
"""
import logging
import re
from typing import List, NamedTuple, Optional

from django.db import DatabaseError, connections, transaction

logger = logging.getLogger('confeccao.store')

UNDEFINED_COLUMN_SQLSTATE = '42703'

UNDEFINED_COLUMN_PATTERNS = (
    re.compile(r'no such column', re.IGNORECASE),
    re.compile(r'has no column named', re.IGNORECASE),
    re.compile(r'column .+ does not exist', re.IGNORECASE),
    re.compile(r'unknown column', re.IGNORECASE),
)


class WriteResult(NamedTuple):
    record: object
    dropped_fields: List[str]


def is_undefined_column_error(exc):
    """True when a database error says a column does not exist."""
    cause = exc.__cause__
    code = getattr(cause, 'pgcode', None) or getattr(cause, 'sqlstate', None)
    if code == UNDEFINED_COLUMN_SQLSTATE:
        return True
    message = str(exc)
    return any(pattern.search(message) for pattern in UNDEFINED_COLUMN_PATTERNS)


class TableStore:
    """CRUD pass-through for one model/table."""

    def __init__(self, model, optional_columns=None, using='default'):
        self.model = model
        if optional_columns is None:
            optional_columns = getattr(model, 'optional_columns', ())
        self.optional_columns = tuple(optional_columns)
        self.using = using

    def __repr__(self):
        return f"<TableStore {self.table}>"

    @property
    def table(self):
        return self.model._meta.db_table

    @property
    def connection(self):
        return connections[self.using]

    # Reads

    def select_all(self, ordering=None, **filters):
        """Return every row (optionally filtered) as a list of model instances."""
        queryset = self.model.objects.using(self.using).filter(**filters)
        if ordering:
            queryset = queryset.order_by(*ordering)
        try:
            with transaction.atomic(using=self.using):
                return list(queryset)
        except DatabaseError as exc:
            missing = self._missing_optional_columns(exc, self.optional_columns)
            if not missing:
                raise
            logger.warning(f"{self.table}: reading without missing optional columns {missing}")
            return [self._fill_defaults(obj, missing) for obj in queryset.defer(*missing)]

    def get(self, pk, dropped_fields=None):
        queryset = self.model.objects.using(self.using)
        if dropped_fields:
            return self._fill_defaults(queryset.defer(*dropped_fields).get(pk=pk), dropped_fields)
        try:
            with transaction.atomic(using=self.using):
                return queryset.get(pk=pk)
        except DatabaseError as exc:
            missing = self._missing_optional_columns(exc, self.optional_columns)
            if not missing:
                raise
            return self._fill_defaults(queryset.defer(*missing).get(pk=pk), missing)

    def exists(self, pk):
        return self.model.objects.using(self.using).filter(pk=pk).exists()

    # Writes

    def insert(self, payload):
        """Insert one row. Returns WriteResult(record, dropped_fields)."""
        try:
            with transaction.atomic(using=self.using):
                record = self.model.objects.using(self.using).create(**payload)
            return WriteResult(record, [])
        except DatabaseError as exc:
            # the ORM writes every concrete column on insert, not only the payload
            missing = self._missing_optional_columns(exc, self.optional_columns)
            if not missing:
                raise
            logger.warning(f"{self.table}: insert retried without missing optional columns {missing}")
            reduced = {key: value for key, value in payload.items() if key not in missing}
            pk = self._insert_columns(reduced, exclude=missing)
            return WriteResult(self.get(pk, dropped_fields=missing), missing)

    def update(self, pk, payload):
        """Update one row by primary key. Returns WriteResult(record, dropped_fields)."""
        dropped = []
        try:
            with transaction.atomic(using=self.using):
                updated = self.model.objects.using(self.using).filter(pk=pk).update(**payload)
        except DatabaseError as exc:
            dropped = self._missing_optional_columns(exc, payload)
            if not dropped:
                raise
            logger.warning(f"{self.table}: update of {pk} retried without missing optional columns {dropped}")
            reduced = {key: value for key, value in payload.items() if key not in dropped}
            with transaction.atomic(using=self.using):
                updated = self.model.objects.using(self.using).filter(pk=pk).update(**reduced)
        if not updated:
            raise self.model.DoesNotExist(f"{self.model.__name__} {pk} does not exist")
        return WriteResult(self.get(pk, dropped_fields=dropped), dropped)

    def delete(self, pk):
        deleted, _ = self.model.objects.using(self.using).filter(pk=pk).delete()
        if not deleted:
            raise self.model.DoesNotExist(f"{self.model.__name__} {pk} does not exist")
        return deleted

    # Capability negotiation

    def live_columns(self):
        """Column names the table really has right now."""
        connection = self.connection
        with connection.cursor() as cursor:
            description = connection.introspection.get_table_description(cursor, self.table)
        return {column.name for column in description}

    def _missing_optional_columns(self, exc, fields) -> List[str]:
        if not is_undefined_column_error(exc):
            return []
        candidates = [name for name in self.optional_columns if name in fields]
        if not candidates:
            return []
        message = str(exc)
        named = [name for name in candidates if self._column(name) in message]
        if named:
            return named
        live = self.live_columns()
        return [name for name in candidates if self._column(name) not in live]

    def _column(self, field_name):
        return self.model._meta.get_field(field_name).column

    def _fill_defaults(self, obj, field_names):
        for name in field_names:
            setattr(obj, name, self.model._meta.get_field(name).get_default())
        return obj

    def _insert_columns(self, payload, exclude) -> Optional[object]:
        """Raw INSERT limited to the columns the table has."""
        connection = self.connection
        opts = self.model._meta
        obj = self.model(**payload)
        fields = [
            field for field in opts.concrete_fields
            if field.name not in exclude and not (field.primary_key and getattr(obj, field.attname) is None)
        ]
        columns = ', '.join(connection.ops.quote_name(field.column) for field in fields)
        placeholders = ', '.join(['%s'] * len(fields))
        params = [field.get_db_prep_save(field.pre_save(obj, True), connection) for field in fields]
        sql = f"INSERT INTO {connection.ops.quote_name(self.table)} ({columns}) VALUES ({placeholders})"
        returning = connection.features.can_return_columns_from_insert
        if returning:
            sql += f" RETURNING {connection.ops.quote_name(opts.pk.column)}"
        with transaction.atomic(using=self.using):
            with connection.cursor() as cursor:
                cursor.execute(sql, params)
                if obj.pk is not None:
                    return obj.pk
                if returning:
                    return cursor.fetchone()[0]
                return cursor.lastrowid
