import uuid
from datetime import datetime, UTC

import sqlalchemy as db
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = db.JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(UTC)


class BaseSchema(DeclarativeBase):
    __abstract__ = True

    uid = db.Column(db.String, primary_key=True, info={"readonly": True})
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, server_default=db.func.now(),
                           index=True, info={"readonly": True})
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=utcnow, info={"readonly": True})
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, info={"readonly": True})

    def __init__(self, **kwargs):
        self.registry.constructor(self, **kwargs)
        if not self.uid:
            self.uid = f"{self.__tablename__.lower()}_{uuid.uuid4()}"

    def model_dump(self, *exclude, sanitize=False) -> dict:
        dump = {}
        for col in self.__table__.columns:  # noqa
            if col.key in exclude: continue
            dump[col.key] = getattr(self, col.key)
        return {k: v for k, v in dump.items() if not sanitize or (v not in (None, []))}
