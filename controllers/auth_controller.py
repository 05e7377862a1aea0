from fastapi import APIRouter, Depends

from controllers.dependencies import get_current_user

router = APIRouter(tags=["auth"])


@router.get("/me")
def who_am_i(user_id: str = Depends(get_current_user)):
    """Echo the verified identity behind the caller's bearer token."""
    return {"message": "Protected data", "userId": user_id}
