"""
Placement Review Routes

GET /placements/{id}/reviews - Reviews of one placement drive
POST /placements/{id}/reviews - Add a quick rating + comment (students only)
"""

from fastapi import APIRouter, Depends, HTTPException

from studentpath.core.auth import get_current_user
from studentpath.schemas.schemas import AuthUser, MessageResponse, ReviewCreate, UserRole
from studentpath.services.placement_service import add_review, get_reviews

router = APIRouter(prefix="/placements", tags=["Placements"])


@router.get("/{placement_id}/reviews")
async def list_reviews(placement_id: int):
    return {"success": True, "data": get_reviews(placement_id)}


@router.post("/{placement_id}/reviews", response_model=MessageResponse)
async def create_review(placement_id: int, review: ReviewCreate, user: AuthUser = Depends(get_current_user)):
    if user.role != UserRole.student:
        raise HTTPException(status_code=403, detail="Only students can review")
    if not review.rating or not review.comment:
        raise HTTPException(status_code=400, detail="Missing fields")

    add_review(placement_id, user.id, review.rating, review.comment)
    return MessageResponse(message="Review added")
