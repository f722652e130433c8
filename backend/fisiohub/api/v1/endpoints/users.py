"""User management API endpoints."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.api.dependencies import DbSession, Hasher, get_identity_store
from fisiohub.api.dependencies.auth import require_access
from fisiohub.core.errors import ValidationFailedError
from fisiohub.models.user import User, UserRole
from fisiohub.schemas.common import Page, PageParams, patch_values
from fisiohub.schemas.user import UserCreate, UserResponse, UserUpdate
from fisiohub.services.auth_gate import AccessContext
from fisiohub.services.identity_store import IdentityStore
from fisiohub.services.repository import TenantScopedRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users")

ReadAccess = Annotated[AccessContext, Depends(require_access("users:read"))]
ManageAccess = Annotated[AccessContext, Depends(require_access("users:manage"))]


def users_of(db: AsyncSession, access: AccessContext) -> TenantScopedRepository[User]:
    return TenantScopedRepository(db, User, access.tenant_id, label="User")


@router.get("", response_model=Page[UserResponse], summary="List users")
async def list_users(
    access: ReadAccess,
    db: DbSession,
    params: Annotated[PageParams, Depends()],
    search: Optional[str] = Query(None, description="Name or email contains"),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
) -> Page[UserResponse]:
    criteria = []
    if search:
        pattern = f"%{search}%"
        criteria.append(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
    if role is not None:
        criteria.append(User.role == role)
    if is_active is not None:
        criteria.append(User.is_active.is_(is_active))

    items, total = await users_of(db, access).list(
        *criteria,
        order_by=(User.full_name.asc(),),
        offset=params.offset,
        limit=params.limit,
    )
    return params.build(items, total, UserResponse)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    data: UserCreate,
    access: ManageAccess,
    db: DbSession,
    hasher: Hasher,
    store: Annotated[IdentityStore, Depends(get_identity_store)],
) -> UserResponse:
    """
    Add a user to the current tenant.

    Raises:
        409: Email already registered in this tenant
    """
    user = await store.create_user(
        tenant_id=access.tenant_id,
        email=data.email,
        password_hash=hasher.hash(data.password),
        full_name=data.full_name,
        role=data.role,
        phone=data.phone,
        specialty=data.specialty,
        professional_registry=data.professional_registry,
        created_by=access.user_id,
    )
    await db.commit()

    logger.info(
        "User created",
        extra={"tenant_id": str(access.tenant_id), "user_id": str(user.id), "role": user.role.value},
    )
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse, summary="Get user")
async def get_user(user_id: UUID, access: ReadAccess, db: DbSession) -> UserResponse:
    return UserResponse.model_validate(await users_of(db, access).get_or_404(user_id))


@router.patch("/{user_id}", response_model=UserResponse, summary="Update user")
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    access: ManageAccess,
    db: DbSession,
) -> UserResponse:
    user = await users_of(db, access).get_or_404(user_id)

    changes = patch_values(data, required=("full_name", "role"))
    if user.id == access.user_id and changes.get("role", user.role) != UserRole.ADMIN:
        raise ValidationFailedError("Admins cannot remove their own admin role")

    for field, value in changes.items():
        setattr(user, field, value)
    user.updated_by = access.user_id
    await db.commit()

    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=UserResponse, summary="Deactivate user")
async def deactivate_user(user_id: UUID, access: ManageAccess, db: DbSession) -> UserResponse:
    """
    Deactivate a user. Users are never deleted; their tokens stop working
    on the next request.

    Raises:
        400: Admin tried to deactivate their own account
    """
    if user_id == access.user_id:
        raise ValidationFailedError("You cannot deactivate your own account")

    user = await users_of(db, access).get_or_404(user_id)
    user.is_active = False
    user.updated_by = access.user_id
    await db.commit()

    logger.info("User deactivated", extra={"tenant_id": str(access.tenant_id), "user_id": str(user.id)})
    return UserResponse.model_validate(user)
