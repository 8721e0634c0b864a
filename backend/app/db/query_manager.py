"""Chainable, Django-flavoured query helpers over SQLModel select statements.

`Model.objects.filter_by(...).order_by(...).first(session)` keeps route and
service code free of repetitive `select()` / `session.exec()` boilerplate
while still exposing the underlying statement for pagination.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func
from sqlmodel import SQLModel, col, select

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

ModelT = TypeVar("ModelT", bound=SQLModel)


@dataclass(frozen=True)
class QuerySet(Generic[ModelT]):
    """Immutable wrapper around a select statement for one model."""

    model: type[ModelT]
    statement: SelectOfScalar[ModelT]

    def filter(self, *criteria: Any) -> QuerySet[ModelT]:
        return replace(self, statement=self.statement.where(*criteria))

    def filter_by(self, **values: Any) -> QuerySet[ModelT]:
        return replace(self, statement=self.statement.filter_by(**values))

    def order_by(self, *clauses: Any) -> QuerySet[ModelT]:
        return replace(self, statement=self.statement.order_by(*clauses))

    def limit(self, value: int) -> QuerySet[ModelT]:
        return replace(self, statement=self.statement.limit(value))

    def offset(self, value: int) -> QuerySet[ModelT]:
        return replace(self, statement=self.statement.offset(value))

    async def first(self, session: AsyncSession) -> ModelT | None:
        return (await session.exec(self.statement)).first()

    async def all(self, session: AsyncSession) -> list[ModelT]:
        return list(await session.exec(self.statement))

    async def count(self, session: AsyncSession) -> int:
        statement = select(func.count()).select_from(self.statement.order_by(None).subquery())
        return int((await session.exec(statement)).one())

    async def exists(self, session: AsyncSession) -> bool:
        return await self.limit(1).first(session) is not None


class ModelManager(Generic[ModelT]):
    """Entry point returning query sets bound to a model class."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def all(self) -> QuerySet[ModelT]:
        return QuerySet(self.model, select(self.model))

    def by_id(self, obj_id: object) -> QuerySet[ModelT]:
        return self.all().filter(col(self.model.id) == obj_id)  # type: ignore[attr-defined]

    def by_ids(self, obj_ids: Iterable[object]) -> QuerySet[ModelT]:
        return self.all().filter(col(self.model.id).in_(list(obj_ids)))  # type: ignore[attr-defined]

    def filter(self, *criteria: Any) -> QuerySet[ModelT]:
        return self.all().filter(*criteria)

    def filter_by(self, **values: Any) -> QuerySet[ModelT]:
        return self.all().filter_by(**values)


class ManagerDescriptor:
    """Class-level descriptor producing a `ModelManager` for the owner model."""

    def __get__(self, instance: object, owner: type[Any]) -> ModelManager[Any]:
        return ModelManager(owner)
