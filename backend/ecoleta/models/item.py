"""
Ecoleta Backend — Item SQLAlchemy Model
========================================

What:  ORM model for the `items` table: the catalogue of waste categories
       a collection point can accept.
When:  Seeded once by the initial Alembic migration; read-only afterwards.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ecoleta.database import Base


class Item(Base):
    """A recyclable item category (e.g. "Lâmpadas", "Óleo de Cozinha")."""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, title='{self.title}')>"
