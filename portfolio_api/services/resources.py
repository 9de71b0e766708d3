"""Create/list persistence for the flat portfolio records."""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Sequence, Type, TypeVar

from sqlmodel import Session, SQLModel, select

from ..core.time import isoformat
from ..models import BlogPost, Message, Project
from .exceptions import ValidationError

RecordT = TypeVar("RecordT", bound=SQLModel)


def _is_filled(value: Any) -> bool:
    # Absent, null, empty text, zero and false all count as missing
    return value is not None and value != "" and value != 0


def _as_text(value: Any) -> str:
    """Store scalar JSON values as text; whitespace is kept as given."""

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(type(value).__name__)


class ResourceStore(Generic[RecordT]):
    """Validates and persists one record type; lists it newest first."""

    def __init__(
        self,
        model: Type[RecordT],
        *,
        required: Sequence[str],
        optional: Sequence[str] = (),
        invalid_message: str,
    ) -> None:
        self.model = model
        self.required = tuple(required)
        self.optional = tuple(optional)
        self.invalid_message = invalid_message

    def _clean(self, fields: Any) -> Dict[str, Any]:
        if not isinstance(fields, dict):
            raise ValidationError("invalid_body", self.invalid_message)

        values: Dict[str, Any] = {}
        for name in self.required:
            value = fields.get(name)
            if not _is_filled(value):
                raise ValidationError("missing_field", self.invalid_message)
            values[name] = self._text(value)
        for name in self.optional:
            value = fields.get(name)
            if value is None:
                continue
            values[name] = self._text(value)
        return values

    def _text(self, value: Any) -> str:
        try:
            return _as_text(value)
        except TypeError:
            raise ValidationError("invalid_field", self.invalid_message) from None

    def create(self, session: Session, fields: Any) -> RecordT:
        """Validate ``fields`` and persist one record.

        Raises ValidationError before touching the session, so a rejected
        request never writes anything.
        """

        record = self.model(**self._clean(fields))
        session.add(record)
        session.commit()
        session.refresh(record)
        return record

    def list_all(self, session: Session) -> List[RecordT]:
        statement = select(self.model).order_by(
            self.model.created_at.desc(), self.model.id.desc()
        )
        return list(session.exec(statement).all())

    def to_dict(self, record: RecordT) -> Dict[str, Any]:
        """Serialise a record to an API-friendly dict."""

        data: Dict[str, Any] = {"id": record.id}
        for name in (*self.required, *self.optional):
            data[name] = getattr(record, name)
        data["created_at"] = isoformat(record.created_at)
        return data


messages = ResourceStore(
    Message,
    required=("name", "email", "message"),
    optional=("subject",),
    invalid_message="Name, email, and message are required.",
)

projects = ResourceStore(
    Project,
    required=("title", "description"),
    optional=("link",),
    invalid_message="Title and description are required.",
)

blog_posts = ResourceStore(
    BlogPost,
    required=("title", "content"),
    invalid_message="Title and content are required.",
)


__all__ = ["ResourceStore", "blog_posts", "messages", "projects"]
