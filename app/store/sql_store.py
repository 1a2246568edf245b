"""ADBOARD — SQLModel-backed Record Store."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Type

from sqlmodel import Session, SQLModel, select

from app.core.errors import NotFound, ValidationError
from app.models.domain_models import Customer, Metric, User
from app.store.base import RecordStore
from app.core.logging import get_logger

logger = get_logger("store.sql")

TABLES: Dict[str, Type[SQLModel]] = {
    "users": User,
    "customers": Customer,
    "metrics": Metric,
}

# Never overwritten through update()
IMMUTABLE_FIELDS = {"id", "created_at"}


class SQLRecordStore(RecordStore):
    """RecordStore over a single SQLModel session (one per request)."""

    def __init__(self, session: Session):
        self.session = session

    def _model(self, table: str) -> Type[SQLModel]:
        try:
            return TABLES[table]
        except KeyError:
            raise ValidationError(f"Unknown table: {table}")

    def get(self, table: str, record_id: str) -> Any:
        obj = self.session.get(self._model(table), record_id)
        if obj is None:
            raise NotFound(table, record_id)
        return obj

    def list(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Any]:
        model = self._model(table)
        query = select(model)

        for field, value in (filters or {}).items():
            column = getattr(model, field)
            if value is None:
                query = query.where(column.is_(None))  # type: ignore
            else:
                query = query.where(column == value)

        for field in order_by or ():
            if field.startswith("-"):
                query = query.order_by(getattr(model, field[1:]).desc())  # type: ignore
            else:
                query = query.order_by(getattr(model, field))

        return list(self.session.exec(query).all())

    def insert(self, table: str, record: Dict[str, Any]) -> Any:
        model = self._model(table)
        data = {k: v for k, v in record.items() if v is not None}
        obj = model.model_validate(data)
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        logger.info(f"Inserted {table} record", extra={"entity_id": obj.id})
        return obj

    def update(self, table: str, record_id: str, patch: Dict[str, Any]) -> Any:
        obj = self.get(table, record_id)
        for field, value in patch.items():
            if field in IMMUTABLE_FIELDS:
                continue
            if not hasattr(obj, field):
                raise ValidationError(f"{table} has no field '{field}'")
            setattr(obj, field, value)
        if hasattr(obj, "updated_at"):
            obj.updated_at = datetime.now(timezone.utc)
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        logger.info(
            f"Updated {table} record ({', '.join(sorted(patch)) or 'no fields'})",
            extra={"entity_id": record_id},
        )
        return obj

    def delete(self, table: str, record_id: str) -> None:
        obj = self.get(table, record_id)
        self.session.delete(obj)
        self.session.commit()
        logger.info(f"Deleted {table} record", extra={"entity_id": record_id})
