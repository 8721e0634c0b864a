"""Small persistence helpers shared by services."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel

from app.core.errors import ConflictError, StoreError
from app.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlmodel.ext.asyncio.session import AsyncSession

ModelT = TypeVar("ModelT", bound=SQLModel)
logger = get_logger(__name__)


async def save(session: AsyncSession, obj: ModelT, *, commit: bool = True) -> ModelT:
    """Add `obj` and optionally commit and refresh it."""
    session.add(obj)
    if commit:
        await session.commit()
        await session.refresh(obj)
    return obj


async def delete(session: AsyncSession, obj: SQLModel, *, commit: bool = True) -> None:
    """Delete `obj` and optionally commit."""
    await session.delete(obj)
    if commit:
        await session.commit()


async def get_or_create(
    session: AsyncSession,
    model: type[ModelT],
    *,
    defaults: dict[str, Any] | None = None,
    **lookup: Any,
) -> tuple[ModelT, bool]:
    """Return the first row matching `lookup`, creating it when missing."""
    existing = await model.objects.filter_by(**lookup).first(session)  # type: ignore[attr-defined]
    if existing is not None:
        return existing, False
    obj = model(**lookup, **(defaults or {}))
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj, True


@asynccontextmanager
async def store_errors(
    session: AsyncSession,
    *,
    conflict_message: str | None = None,
) -> AsyncIterator[None]:
    """Translate store failures raised inside the block into service errors.

    The session is rolled back before re-raising. `IntegrityError` maps to
    `ConflictError` when `conflict_message` is given, otherwise every
    SQLAlchemy failure maps to `StoreError`.
    """
    try:
        yield
    except IntegrityError as exc:
        await session.rollback()
        if conflict_message is not None:
            raise ConflictError(conflict_message) from exc
        raise StoreError("The data store rejected the write.") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.warning("store.operation_failed", extra={"error_type": type(exc).__name__})
        raise StoreError("The data store is unavailable; retry the operation.") from exc
