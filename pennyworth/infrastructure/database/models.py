"""Table mappings."""

from uuid import UUID

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from pennyworth.infrastructure.database.base import BaseModel


class CustomerModel(BaseModel):
    """Row of the ``customers`` table."""

    __tablename__ = "customers"

    uuid: Mapped[UUID] = mapped_column(Uuid, unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
