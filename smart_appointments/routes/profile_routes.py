from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_appointments.auth.dependencies import CurrentUser, get_current_user
from smart_appointments.database import DATABASE_UNAVAILABLE_DETAIL, get_db
from smart_appointments.models.user import Profile

router = APIRouter(tags=['profile'])

MAX_NAME_LENGTH = 100


class UpdateProfileRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_NAME_LENGTH:
            raise ValueError(f'Names must be {MAX_NAME_LENGTH} characters or fewer.')

        return normalized

    @field_validator('avatar_url')
    @classmethod
    def validate_avatar_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if normalized and not normalized.startswith(('http://', 'https://')):
            raise ValueError('Avatar URL must be an http(s) URL.')
        return normalized or None


class ProfileResponse(BaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


@router.get('', response_model=ProfileResponse)
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        profile = db.query(Profile).filter(Profile.id == current_user.id).first()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    if profile is None:
        return ProfileResponse(id=current_user.id)

    return profile


@router.put('', response_model=ProfileResponse)
def update_profile(
    data: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        profile = db.query(Profile).filter(Profile.id == current_user.id).first()
        if profile is None:
            profile = Profile(id=current_user.id)
            db.add(profile)

        profile.first_name = data.first_name
        profile.last_name = data.last_name
        profile.avatar_url = data.avatar_url
        db.commit()
        db.refresh(profile)

        return profile
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc
