"""Async limit/offset pagination over SQLModel select statements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi_pagination.ext.sqlalchemy import paginate as _paginate

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar


async def paginate(
    session: AsyncSession,
    statement: SelectOfScalar[Any],
    *,
    transformer: Callable[[Sequence[Any]], Sequence[Any]] | None = None,
) -> Any:
    """Paginate `statement` using the request's limit/offset params."""
    if transformer is None:
        return await _paginate(session, statement)
    return await _paginate(session, statement, transformer=transformer)
