"""Tenant-scoped data access."""

from typing import Any, Generic, Optional, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.core.errors import ResourceNotFoundError
from fisiohub.models.base import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class TenantScopedRepository(Generic[ModelT]):
    """
    Query helper bound to one model and one tenant.

    Every statement it builds carries ``tenant_id == <resolved tenant>``;
    there is no method that reads or writes without it. Records of other
    tenants are indistinguishable from records that do not exist.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[ModelT],
        tenant_id: UUID,
        label: Optional[str] = None,
    ) -> None:
        self.session = session
        self.model = model
        self.tenant_id = tenant_id
        self.label = label or model.__name__

    def select(self, *criteria: ColumnElement[bool]) -> Select[tuple[ModelT]]:
        """SELECT for this model restricted to the tenant."""
        return select(self.model).where(self.model.tenant_id == self.tenant_id, *criteria)

    def tenant_filter(self, model: type[BaseModel]) -> ColumnElement[bool]:
        """Tenant predicate for another model joined into a query."""
        return model.tenant_id == self.tenant_id

    async def get(self, record_id: UUID) -> Optional[ModelT]:
        result = await self.session.execute(self.select(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_or_404(self, record_id: UUID) -> ModelT:
        """
        Fetch a record of this tenant.

        Raises:
            ResourceNotFoundError: If the id is unknown or belongs to another tenant
        """
        record = await self.get(record_id)
        if record is None:
            raise ResourceNotFoundError(f"{self.label} not found")
        return record

    async def exists(self, *criteria: ColumnElement[bool]) -> bool:
        result = await self.session.execute(
            select(self.model.id)
            .where(self.model.tenant_id == self.tenant_id, *criteria)
            .limit(1)
        )
        return result.first() is not None

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(self.model)
            .where(self.model.tenant_id == self.tenant_id, *criteria)
        )
        return int(result.scalar_one())

    async def list(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        offset: int = 0,
        limit: Optional[int] = None,
        options: Sequence[Any] = (),
    ) -> tuple[list[ModelT], int]:
        """
        Page through matching records.

        Returns:
            (records of the requested page, total number of matches)
        """
        total = await self.count(*criteria)

        statement = self.select(*criteria).order_by(*order_by).offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        if options:
            statement = statement.options(*options)

        result = await self.session.execute(statement)
        return list(result.scalars().all()), total

    async def add(self, record: ModelT) -> ModelT:
        """Stamp the tenant on a new record and flush it."""
        record.tenant_id = self.tenant_id
        self.session.add(record)
        await self.session.flush()
        return record

    async def delete(self, record: ModelT) -> None:
        if record.tenant_id != self.tenant_id:
            raise ResourceNotFoundError(f"{self.label} not found")
        await self.session.delete(record)
        await self.session.flush()
