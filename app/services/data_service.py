import logging

from sqlalchemy.exc import SQLAlchemyError

from app.errors import RemoteServiceError, ValidationError
from app.extensions import db

logger = logging.getLogger(__name__)

FILTER_OPERATORS = {
    "eq": lambda col, value: col == value,
    "ne": lambda col, value: col != value,
    "gt": lambda col, value: col > value,
    "gte": lambda col, value: col >= value,
    "lt": lambda col, value: col < value,
    "lte": lambda col, value: col <= value,
    "in": lambda col, value: col.in_(list(value)),
    "ilike": lambda col, value: col.ilike(f"%{value}%"),
    "is": lambda col, value: col.is_(value),
}


class DataService:
    """Generic record access with filter predicates.

    Filters are ``{"column__op": value}``; a key without ``__op`` means
    equality. Failures from the database are rolled back and re-raised as
    ``RemoteServiceError`` so callers see one error type for the data layer.
    """

    @staticmethod
    def _column(model, name):
        column = getattr(model, name, None)
        if column is None or not hasattr(column, "property"):
            raise ValidationError(f"Unknown column: {name}.", fields=[name])
        return column

    @staticmethod
    def build_criteria(model, filters):
        criteria = []
        for key, value in (filters or {}).items():
            name, _, op = key.partition("__")
            op = op or "eq"
            if op not in FILTER_OPERATORS:
                raise ValidationError(f"Unknown filter operator: {op}.", fields=[key])
            criteria.append(FILTER_OPERATORS[op](DataService._column(model, name), value))
        return criteria

    @staticmethod
    def query(model, filters=None, order_by=None):
        query = model.query.filter(*DataService.build_criteria(model, filters))
        for item in order_by or ():
            descending = item.startswith("-")
            column = DataService._column(model, item.lstrip("-"))
            query = query.order_by(column.desc() if descending else column.asc())
        return query

    @staticmethod
    def select(model, filters=None, order_by=None, limit=None):
        try:
            query = DataService.query(model, filters, order_by)
            if limit:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as exc:
            DataService._fail(f"select {model.__tablename__}", exc)

    @staticmethod
    def first(model, filters):
        rows = DataService.select(model, filters, limit=1)
        return rows[0] if rows else None

    @staticmethod
    def insert(model, rows, commit=True):
        try:
            created = [model(**row) for row in rows]
            db.session.add_all(created)
            db.session.flush()
            if commit:
                db.session.commit()
            return created
        except SQLAlchemyError as exc:
            DataService._fail(f"insert {model.__tablename__}", exc)

    @staticmethod
    def update(model, patch, filters, commit=True):
        if not filters:
            raise ValidationError("Refusing to update without filters.")
        try:
            count = DataService.query(model, filters).update(dict(patch), synchronize_session="fetch")
            if commit:
                db.session.commit()
            return count
        except SQLAlchemyError as exc:
            DataService._fail(f"update {model.__tablename__}", exc)

    @staticmethod
    def delete(model, filters, commit=True):
        if not filters:
            raise ValidationError("Refusing to delete without filters.")
        try:
            count = DataService.query(model, filters).delete(synchronize_session="fetch")
            if commit:
                db.session.commit()
            return count
        except SQLAlchemyError as exc:
            DataService._fail(f"delete {model.__tablename__}", exc)

    @staticmethod
    def soft_delete(model, filters, flag="is_deleted", commit=True):
        DataService._column(model, flag)
        return DataService.update(model, {flag: True}, filters, commit=commit)

    @staticmethod
    def _fail(action, exc):
        db.session.rollback()
        logger.error("Data service failure during %s: %s", action, exc)
        raise RemoteServiceError("Data service request failed.") from exc
