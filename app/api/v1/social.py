from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_current_user, get_social_service
from app.models.user import User
from app.schemas.common import paginate
from app.schemas.social import PostCreate, CommentCreate, CommentResponse, LikeResponse, FollowResponse
from app.schemas.user import UserSummary
from app.services.social_service import SocialService, serialize_post

router = APIRouter(tags=["social"])


@router.get("/feed")
async def feed(
    filter: str = Query("all", pattern="^(all|following|my-posts)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    user_id = current_user.id
    posts, total = await service.feed(user_id, filter, page, limit)
    return {
        "success": True,
        "data": {
            "posts": [serialize_post(p, user_id) for p in posts],
            "pagination": paginate(total, page, limit),
        },
    }


@router.post("/posts", status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    current_user: User = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    user_id = current_user.id
    post = await service.create_post(user_id, data)
    return {
        "success": True,
        "message": "Post created successfully",
        "data": {"post": serialize_post(post, user_id)},
    }


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    await service.delete_post(post_id, current_user.id)
    return {"success": True, "message": "Post deleted successfully"}


@router.post("/posts/{post_id}/like")
async def toggle_like(
    post_id: int,
    current_user: User = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    result = await service.toggle_like(post_id, current_user)
    return {"success": True, "data": LikeResponse(**result)}


@router.post("/posts/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: int,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    comments = await service.add_comment(post_id, current_user, data.text)
    return {
        "success": True,
        "message": "Comment added",
        "data": {"comments": [CommentResponse.model_validate(c) for c in comments]},
    }


@router.post("/follow/{user_id}")
async def toggle_follow(
    user_id: int,
    current_user: User = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    following = await service.toggle_follow(current_user, user_id)
    return {
        "success": True,
        "message": "Followed user" if following else "Unfollowed user",
        "data": FollowResponse(following=following),
    }


@router.get("/connections/{user_id}")
async def connections(
    user_id: int,
    type: str = Query("followers", pattern="^(followers|following)$"),
    current_user: User = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    users = await service.connections(user_id, type)
    return {
        "success": True,
        "data": {"users": [UserSummary.model_validate(u) for u in users], "count": len(users)},
    }
