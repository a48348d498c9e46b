"""
Document-style persistence over SQLAlchemy.

Records are addressed by ``(resource_type, filter)`` where a filter is a plain
mapping of field name to value. Values are matched for equality unless
wrapped in ``Contains`` (case-insensitive substring). ``find_many`` accepts a
second mapping, ``scope``, which is ANDed into the same query; access
policies hand their restrictions to the store this way so that records
outside the caller's scope are never loaded.
"""
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .exceptions import ConstraintViolation, DuplicateRecord
from ..models.appointment import Appointment
from ..models.doctor import Doctor
from ..models.lab_record import LabRecord
from ..models.patient import Patient
from ..models.user import User

logger = logging.getLogger(__name__)


class ResourceType(str, Enum):
    APPOINTMENT = "appointment"
    PATIENT = "patient"
    DOCTOR = "doctor"
    LAB_RECORD = "lab_record"
    USER = "user"


MODELS = {
    ResourceType.APPOINTMENT: Appointment,
    ResourceType.PATIENT: Patient,
    ResourceType.DOCTOR: Doctor,
    ResourceType.LAB_RECORD: LabRecord,
    ResourceType.USER: User,
}


class Contains:
    """Case-insensitive substring match for a filter value."""

    def __init__(self, text: str):
        self.text = text

    def __eq__(self, other):
        return isinstance(other, Contains) and other.text == self.text

    def __repr__(self):
        return f"Contains({self.text!r})"


Filter = Mapping[str, Any]
Sort = Iterable[Tuple[str, bool]]  # (field, descending)


class DocumentStore:
    def __init__(self, db: Session):
        self.db = db

    def _model(self, resource_type: ResourceType):
        return MODELS[ResourceType(resource_type)]

    def _clauses(self, model, filter: Optional[Filter]) -> List:
        clauses = []
        for field, value in (filter or {}).items():
            column = getattr(model, field, None)
            if column is None:
                raise ValueError(f"Unknown field '{field}' for {model.__tablename__}")
            if isinstance(value, Contains):
                escaped = value.text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
                clauses.append(column.ilike(f"%{escaped}%", escape="\\"))
            else:
                clauses.append(column == value)
        return clauses

    def find_one(self, resource_type: ResourceType, filter: Filter):
        model = self._model(resource_type)
        stmt = select(model).where(*self._clauses(model, filter)).limit(1)
        return self.db.execute(stmt).scalars().first()

    def find_many(
        self,
        resource_type: ResourceType,
        filter: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        scope: Optional[Filter] = None,
    ) -> List:
        model = self._model(resource_type)
        stmt = select(model).where(
            *self._clauses(model, filter),
            *self._clauses(model, scope)
        )
        for field, descending in sort or ():
            column = getattr(model, field)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        return list(self.db.execute(stmt).scalars().all())

    def insert(self, resource_type: ResourceType, fields: Dict[str, Any]):
        model = self._model(resource_type)
        record = model(**fields)
        self.db.add(record)
        self._commit(resource_type)
        self.db.refresh(record)
        return record

    def update_by_id(self, resource_type: ResourceType, record_id: int, fields: Dict[str, Any]):
        record = self.find_one(resource_type, {"id": record_id})
        if record is None:
            return None
        for field, value in fields.items():
            if not hasattr(record, field):
                raise ValueError(f"Unknown field '{field}' for {record.__tablename__}")
            setattr(record, field, value)
        self._commit(resource_type)
        self.db.refresh(record)
        return record

    def delete_by_id(self, resource_type: ResourceType, record_id: int):
        record = self.find_one(resource_type, {"id": record_id})
        if record is None:
            return None
        self.db.delete(record)
        self._commit(resource_type)
        return record

    def _commit(self, resource_type: ResourceType):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(
                "Integrity error on %s write", resource_type.value,
                extra={"resource_type": resource_type.value, "error": str(exc.orig)}
            )
            if is_unique_violation(exc):
                raise DuplicateRecord(
                    f"{resource_type.value.replace('_', ' ').capitalize()} with this email already exists"
                ) from exc
            raise ConstraintViolation() from exc


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for unique-constraint failures on PostgreSQL and SQLite."""
    # 23505 is PostgreSQL's unique_violation SQLSTATE
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    return "unique constraint" in str(exc.orig).lower()
