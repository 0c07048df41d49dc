"""Routers for account creation and session management."""

from fastapi import APIRouter, Depends, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..dependencies import get_current_principal, get_mongo_database
from ..errors import Unauthenticated
from ..logging_utils import get_logger
from ..schemas import SessionCreate, SignupRequest, SuccessEnvelope, UserEnvelope
from ..security import end_session, start_session
from ..services.auth import authenticate, fetch_user, register_user

router = APIRouter(prefix="/api", tags=["auth"])
logger = get_logger("auth")


@router.post(
    "/signup",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account.",
)
async def signup(
    payload: SignupRequest,
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> UserEnvelope:
    user = await register_user(database, payload)
    logger.info("Registered user '%s'.", user.id)
    return UserEnvelope(user=user)


@router.post(
    "/session",
    response_model=UserEnvelope,
    summary="Sign in with email and password.",
)
async def create_session(
    payload: SessionCreate,
    request: Request,
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> UserEnvelope:
    user = await authenticate(database, payload.email, payload.password)
    if user is None:
        raise Unauthenticated("Invalid email or password")
    start_session(request, user.id)
    logger.info("Session started for user '%s'.", user.id)
    return UserEnvelope(user=user)


@router.get(
    "/session",
    response_model=UserEnvelope,
    summary="Return the signed-in user.",
)
async def read_session(
    request: Request,
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> UserEnvelope:
    user = await fetch_user(database, principal)
    if user is None:
        end_session(request)
        raise Unauthenticated()
    return UserEnvelope(user=user)


@router.delete(
    "/session",
    response_model=SuccessEnvelope,
    summary="Sign out.",
)
async def delete_session(request: Request) -> SuccessEnvelope:
    end_session(request)
    return SuccessEnvelope()
