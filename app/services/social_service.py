import logging
from typing import Optional, List, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, AuthorizationError, ValidationError
from app.models.social import SocialPost, PostLike, PostComment, Follow, PostTypeEnum, VisibilityEnum
from app.models.user import User
from app.schemas.social import PostCreate, PostResponse, CommentResponse
from app.schemas.user import UserSummary
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

FEED_FILTERS = ("all", "following", "my-posts")

# Thresholds for auto-sharing a logged workout
SIGNIFICANT_DURATION = 60
SIGNIFICANT_CALORIES = 500


def is_significant_workout(duration: Optional[int], calories: Optional[float]) -> bool:
    return (duration or 0) >= SIGNIFICANT_DURATION or (calories or 0) >= SIGNIFICANT_CALORIES


def serialize_post(post: SocialPost, viewer_id: int) -> PostResponse:
    return PostResponse(
        id=post.id,
        user=UserSummary.model_validate(post.user),
        type=post.type,
        text=post.text,
        workout_id=post.workout_id,
        achievement_id=post.achievement_id,
        media=post.media,
        visibility=post.visibility,
        shares=post.shares or 0,
        likes=len(post.likes),
        liked_by_me=any(like.user_id == viewer_id for like in post.likes),
        comments=[CommentResponse.model_validate(c) for c in post.comments],
        created_at=post.created_at,
    )


class SocialService:
    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    async def _get_post(self, post_id: int) -> SocialPost:
        result = await self.db.execute(
            select(SocialPost)
            .where(SocialPost.id == post_id)
            .execution_options(populate_existing=True)
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def feed(
            self,
            user_id: int,
            filter: str = "all",
            page: int = 1,
            limit: int = 20,
    ) -> Tuple[List[SocialPost], int]:
        if filter not in FEED_FILTERS:
            raise ValidationError(f"Invalid filter: {filter}")

        query = select(SocialPost)
        if filter == "my-posts":
            query = query.where(SocialPost.user_id == user_id)
        else:
            query = query.where(SocialPost.visibility.in_([VisibilityEnum.public, VisibilityEnum.friends]))
            if filter == "following":
                followees = select(Follow.following_id).where(Follow.follower_id == user_id)
                query = query.where(or_(SocialPost.user_id.in_(followees), SocialPost.user_id == user_id))

        count = await self.db.execute(select(func.count()).select_from(query.subquery()))
        total = count.scalar_one()

        result = await self.db.execute(
            query.order_by(SocialPost.created_at.desc(), SocialPost.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalars().all(), total

    async def create_post(self, user_id: int, data: PostCreate) -> SocialPost:
        if not (data.text and data.text.strip()) and not data.media and not data.workout_id and not data.achievement_id:
            raise ValidationError("Post must have text, media or a linked workout or achievement")

        post = SocialPost(
            user_id=user_id,
            type=data.type,
            text=data.text.strip() if data.text else None,
            workout_id=data.workout_id,
            achievement_id=data.achievement_id,
            media=[item.model_dump(mode="json") for item in data.media],
            visibility=data.visibility,
        )
        self.db.add(post)
        await self.db.commit()
        return await self._get_post(post.id)

    async def create_workout_post(self, user_id: int, workout_id: int, title: str) -> SocialPost:
        post = SocialPost(
            user_id=user_id,
            type=PostTypeEnum.workout,
            text=f'Just completed an amazing workout: "{title}"! 💪',
            workout_id=workout_id,
            visibility=VisibilityEnum.public,
        )
        self.db.add(post)
        await self.db.commit()
        return post

    async def delete_post(self, post_id: int, user_id: int) -> None:
        post = await self._get_post(post_id)
        if post.user_id != user_id:
            raise AuthorizationError("Not authorized to delete this post")
        await self.db.delete(post)
        await self.db.commit()

    async def toggle_like(self, post_id: int, user: User) -> dict:
        post = await self._get_post(post_id)
        author_id = post.user_id
        user_id, user_name = user.id, user.name

        result = await self.db.execute(
            select(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        )
        existing = result.scalar_one_or_none()

        if existing is not None:
            await self.db.delete(existing)
            await self.db.commit()
            liked = False
        else:
            self.db.add(PostLike(post_id=post_id, user_id=user_id))
            try:
                await self.db.commit()
                liked = True
            except IntegrityError:
                # Concurrent like from the same user; the like stands
                await self.db.rollback()
                liked = True
            else:
                if author_id != user_id:
                    await self.notifier.create(
                        author_id,
                        "social",
                        "❤️ New Like",
                        f"{user_name} liked your post",
                        {"post_id": post_id, "user_id": user_id},
                    )

        count = await self.db.execute(select(func.count(PostLike.id)).where(PostLike.post_id == post_id))
        return {"likes": count.scalar_one(), "liked": liked}

    async def add_comment(self, post_id: int, user: User, text: str) -> List[PostComment]:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Comment text is required")

        post = await self._get_post(post_id)
        author_id = post.user_id
        user_id, user_name = user.id, user.name

        self.db.add(PostComment(post_id=post_id, user_id=user_id, text=text))
        await self.db.commit()

        if author_id != user_id:
            await self.notifier.create(
                author_id,
                "social",
                "💬 New Comment",
                f"{user_name} commented on your post",
                {"post_id": post_id, "user_id": user_id},
            )
        return (await self._get_post(post_id)).comments

    async def toggle_follow(self, follower: User, target_id: int) -> bool:
        follower_id, follower_name = follower.id, follower.name
        if follower_id == target_id:
            raise ValidationError("Cannot follow yourself")

        target = await self.db.get(User, target_id)
        if target is None or not target.is_active:
            raise NotFoundError("User not found")

        result = await self.db.execute(
            select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == target_id)
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            await self.db.delete(existing)
            await self.db.commit()
            return False

        self.db.add(Follow(follower_id=follower_id, following_id=target_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return True

        await self.notifier.create(
            target_id,
            "social",
            "👥 New Follower",
            f"{follower_name} started following you",
            {"user_id": follower_id},
        )
        return True

    async def connections(self, user_id: int, type: str = "followers") -> List[User]:
        if type == "followers":
            query = (
                select(User)
                .join(Follow, Follow.follower_id == User.id)
                .where(Follow.following_id == user_id)
            )
        elif type == "following":
            query = (
                select(User)
                .join(Follow, Follow.following_id == User.id)
                .where(Follow.follower_id == user_id)
            )
        else:
            raise ValidationError(f"Invalid connection type: {type}")

        result = await self.db.execute(query.order_by(Follow.created_at.desc()))
        return result.scalars().all()
