import datetime
from typing import Any, Dict

from sqlalchemy import Column, DateTime, Integer, ForeignKey, Boolean
from sqlalchemy.orm import DeclarativeBase, declared_attr

from db_domains.db import Base


def to_dict(obj: DeclarativeBase) -> Dict[str, Any]:
    """
    Convert an SQLAlchemy model instance into a dictionary.
    """
    data = {}  # Initialize an empty dictionary

    # Iterate over all columns of the model
    for column in obj.__table__.columns.keys():
        column_name = column
        column_value = getattr(obj, column_name)
        data[column_name] = column_value

    return data


def utc_now() -> datetime.datetime:
    # Naive UTC: SQLite drops tzinfo on round trip, so every stored and compared timestamp stays naive
    return datetime.datetime.now(datetime.UTC).replace(tzinfo=None)


class CreateUpdateTime(Base):
    __abstract__ = True

    created_at = Column(DateTime, default=utc_now)
    modified_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    is_deleted = Column(Boolean, default=False)
    deleted_at = Column(DateTime, nullable=True)


class CreateByUpdateBy(Base):
    __abstract__ = True

    @declared_attr
    def created_by(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=True)

    @declared_attr
    def modified_by(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=True)
