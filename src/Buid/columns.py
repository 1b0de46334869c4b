"""SQLAlchemy column types for BUID values.

Values are stored as fixed-length binary so that a byte-ordered backend
(SQLite BLOBs, Postgres bytea, MySQL BINARY) orders rows by identifier.

    class Message(Base):
        __tablename__ = "messages"
        key: Mapped[Key] = mapped_column(KeyType(), primary_key=True)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import LargeBinary
from sqlalchemy.types import TypeDecorator

from Buid.identifier import ID, Key, Shard, _Binary


class _BinaryType(TypeDecorator):
    impl = LargeBinary
    cache_ok = True

    value_type: type[_Binary] = _Binary

    def __init__(self) -> None:
        super().__init__(self.value_type.SIZE)

    @property
    def python_type(self) -> type:
        return self.value_type

    def process_bind_param(self, value: Any, dialect) -> bytes | None:
        if value is None:
            return None
        if isinstance(value, str):
            value = self.value_type.parse(value)
        elif not isinstance(value, self.value_type):
            value = self.value_type(bytes(value))
        return bytes(value)

    def process_result_value(self, value: Any, dialect) -> _Binary | None:
        if value is None:
            return None
        return self.value_type(bytes(value))


class IDType(_BinaryType):
    value_type = ID


class ShardType(_BinaryType):
    value_type = Shard


class KeyType(_BinaryType):
    value_type = Key


__all__ = ["IDType", "KeyType", "ShardType"]
