from fastapi import APIRouter, Depends

from smart_appointments.auth.dependencies import CurrentUser, get_current_user

router = APIRouter(tags=['auth'])


@router.get("/me")
def me(current_user: CurrentUser = Depends(get_current_user)):
    return {"id": current_user.id, "email": current_user.email, "role": current_user.role}
