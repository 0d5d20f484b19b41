import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradewire.auth.jwt import create_access_token
from tradewire.auth.password import hash_password, verify_password
from tradewire.database import get_db
from tradewire.models.advisor import Advisor
from tradewire.schemas.advisor_schema import (
    AdvisorCreate,
    AdvisorLogin,
    LoginResponse,
    MessageResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Advisors"])


@router.post("/create-advisor", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_advisor(advisor_data: AdvisorCreate, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Advisor.id).where(Advisor.email == advisor_data.email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Advisor already exists")

    db.add(Advisor(
        email=advisor_data.email,
        full_name=advisor_data.full_name,
        password_hash=hash_password(advisor_data.password),
    ))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Advisor already exists")

    logger.info(f"Advisor provisioned: {advisor_data.email}")
    return MessageResponse(message="Advisor Created Successfully")


@router.post("/login", response_model=LoginResponse)
async def login(credentials: AdvisorLogin, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Advisor).where(Advisor.email == credentials.email))
    advisor = result.scalar_one_or_none()
    if advisor is None:
        raise HTTPException(status_code=400, detail="Advisor not found")
    if not verify_password(credentials.password, advisor.password_hash):
        logger.warning(f"Failed login for advisor {credentials.email}")
        raise HTTPException(status_code=400, detail="Invalid password")

    return LoginResponse(
        message="Login successful",
        token=create_access_token(advisor.id, advisor.email),
    )
