"""Business API — onboarding create/update, lookup and listing."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from onboarding_api.db.database import get_db
from onboarding_api.models.business import Business
from onboarding_api.models.user import User
from onboarding_api.schemas.business import (
    BasicInfoUpsert,
    BusinessCreate,
    BusinessOnboardingCreate,
    BusinessResponse,
    BusinessSummary,
    BusinessUpdate,
)
from onboarding_api.services.categories import category_from_label

router = APIRouter()
logger = logging.getLogger(__name__)


async def _resolve_owner_id(db: AsyncSession, owner_id: uuid.UUID | None) -> uuid.UUID:
    """Use the given owner, or fall back to the first registered user."""
    if owner_id:
        return owner_id
    result = await db.execute(select(User).order_by(User.created_at).limit(1))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=400, detail="No user found to assign as business owner")
    return user.id


async def _get_business(db: AsyncSession, business_id: uuid.UUID) -> Business | None:
    result = await db.execute(select(Business).where(Business.id == business_id))
    return result.scalar_one_or_none()


# ── GET /api/businesses ──────────────────────────────────

@router.get("/", response_model=list[BusinessSummary])
async def list_businesses(
    category: str | None = Query(None, description="Category label, e.g. touch or TOUCH"),
    location: str | None = Query(None, description="Matches city or state (case-insensitive)"),
    skip: int = 0,
    limit: int = 50,
    db: AsyncSession = Depends(get_db),
):
    """List businesses with optional category and location filters."""
    query = select(Business)
    if category:
        mapped = category_from_label(category)
        query = query.where(Business.category == (mapped.value if mapped else None))
    if location:
        pattern = f"%{location}%"
        query = query.where(or_(Business.city.ilike(pattern), Business.state.ilike(pattern)))
    query = query.order_by(Business.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


# ── POST /api/businesses ─────────────────────────────────

@router.post("/", response_model=BusinessResponse, status_code=201)
async def create_business(data: BusinessCreate, db: AsyncSession = Depends(get_db)):
    """Create a complete business profile."""
    owner_id = await _resolve_owner_id(db, data.owner_id)
    fields = data.model_dump(mode="json", exclude={"owner_id"})

    try:
        business = Business(owner_id=owner_id, **fields)
        db.add(business)
        await db.commit()
        await db.refresh(business)
    except SQLAlchemyError:
        logger.exception("Error creating business: name=%s", data.name)
        raise HTTPException(status_code=500, detail="Failed to create business")

    logger.info("Business created: id=%s, name=%s, owner=%s", business.id, business.name, owner_id)
    return business


# ── POST /api/businesses/basic-info ──────────────────────

@router.post("/basic-info", response_model=BusinessResponse)
async def save_basic_info(data: BasicInfoUpsert, db: AsyncSession = Depends(get_db)):
    """Create or update the basic-info part of a business (first onboarding step)."""
    fields = {
        "name": data.business_name,
        "description": data.description,
        "category": data.category.value if data.category else None,
        "phone": data.phone,
        "email": data.email,
    }

    business = await _get_business(db, data.id) if data.id else None
    try:
        if business:
            for key, value in fields.items():
                setattr(business, key, value)
            action = "updated"
        else:
            owner_id = await _resolve_owner_id(db, data.owner_id)
            business = Business(owner_id=owner_id, **fields)
            db.add(business)
            action = "created"
        await db.commit()
        await db.refresh(business)
    except SQLAlchemyError:
        logger.exception("Error saving basic info: id=%s", data.id)
        raise HTTPException(status_code=500, detail="Failed to save data")

    logger.info("Basic info %s: id=%s, name=%s", action, business.id, business.name)
    return business


# ── POST /api/businesses/onboarding ──────────────────────

@router.post("/onboarding", response_model=BusinessResponse, status_code=201)
async def create_from_onboarding(data: BusinessOnboardingCreate, db: AsyncSession = Depends(get_db)):
    """Create a business from a complete onboarding payload."""
    owner_id = await _resolve_owner_id(db, data.owner_id)
    fields = data.model_dump(mode="json", exclude={"owner_id", "business_name", "name"})

    try:
        business = Business(owner_id=owner_id, name=data.resolved_name, **fields)
        db.add(business)
        await db.commit()
        await db.refresh(business)
    except SQLAlchemyError:
        logger.exception("Error creating business from onboarding: name=%s", data.resolved_name)
        raise HTTPException(status_code=500, detail="Failed to create business")

    logger.info("Business onboarded: id=%s, name=%s", business.id, business.name)
    return business


# ── GET /api/businesses/{id} ─────────────────────────────

@router.get("/{business_id}", response_model=BusinessResponse)
async def get_business(business_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get a single business by ID."""
    business = await _get_business(db, business_id)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")
    return business


# ── PATCH /api/businesses/{id} ───────────────────────────

@router.patch("/{business_id}", response_model=BusinessResponse)
async def update_business(
    business_id: uuid.UUID,
    data: BusinessUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Apply a partial update; only fields present in the body are written."""
    business = await _get_business(db, business_id)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")

    changes = data.model_dump(mode="json", exclude_unset=True)
    try:
        for key, value in changes.items():
            setattr(business, key, value)
        await db.commit()
        await db.refresh(business)
    except SQLAlchemyError:
        logger.exception("Error updating business: id=%s", business_id)
        raise HTTPException(status_code=500, detail="Failed to save data")

    logger.info("Business updated: id=%s, fields=%s", business_id, sorted(changes))
    return business
