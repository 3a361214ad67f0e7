from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.exceptions import NotFoundError
from app.core.rbac import require_admin
from app.models.membership import Membership
from app.models.user import User
from app.schemas.membership import MembershipCreate, MembershipUpdate, MembershipResponse

router = APIRouter(tags=["memberships"])


async def _get_plan(db: AsyncSession, membership_id: int) -> Membership:
    membership = await db.get(Membership, membership_id)
    if membership is None:
        raise NotFoundError("Membership plan not found")
    return membership


@router.get("")
async def list_memberships(db: AsyncSession = Depends(get_db)):
    """Active plans, cheapest first."""
    result = await db.execute(
        select(Membership)
        .where(Membership.is_active.is_(True))
        .order_by(Membership.price.asc(), Membership.id.asc())
    )
    plans = result.scalars().all()
    return {"success": True, "data": {"memberships": [MembershipResponse.model_validate(m) for m in plans]}}


@router.get("/{membership_id}")
async def get_membership(membership_id: int, db: AsyncSession = Depends(get_db)):
    membership = await _get_plan(db, membership_id)
    return {"success": True, "data": {"membership": MembershipResponse.model_validate(membership)}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_membership(
    data: MembershipCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    membership = Membership(**data.model_dump())
    db.add(membership)
    await db.commit()
    await db.refresh(membership)
    return {
        "success": True,
        "message": "Membership plan created successfully",
        "data": {"membership": MembershipResponse.model_validate(membership)},
    }


@router.put("/{membership_id}")
async def update_membership(
    membership_id: int,
    data: MembershipUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    membership = await _get_plan(db, membership_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(membership, field, value)
    await db.commit()
    await db.refresh(membership)
    return {
        "success": True,
        "message": "Membership plan updated successfully",
        "data": {"membership": MembershipResponse.model_validate(membership)},
    }


@router.delete("/{membership_id}")
async def delete_membership(
    membership_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    membership = await _get_plan(db, membership_id)
    await db.delete(membership)
    await db.commit()
    return {"success": True, "message": "Membership plan deleted successfully"}
