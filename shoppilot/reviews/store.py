from __future__ import annotations

import math
import uuid
from datetime import datetime

from ..errors import Conflict, Forbidden, NotFound
from ..shops.store import get_shop_store
from .models import (
    HelpfulToggle,
    Pagination,
    ReplyRequest,
    Review,
    ReviewCreate,
    ReviewPage,
    ReviewReply,
    ReviewSort,
    ReviewStats,
    ReviewUpdate,
)

# Insertion order doubles as creation order.
_reviews: dict[str, Review] = {}


def _is_admin(user: dict) -> bool:
    return user.get("role") == "admin"


def _require_review(review_id: str) -> Review:
    review = _reviews.get(review_id)
    if review is None:
        raise NotFound("Review not found", message="Review not found")
    return review


def create_review(body: ReviewCreate, user: dict) -> Review:
    if get_shop_store().get(body.shop_id) is None:
        raise NotFound("Shop not found", message="Shop not found")
    if any(r.shop_id == body.shop_id and r.user_id == user["id"] for r in _reviews.values()):
        raise Conflict("You have already reviewed this shop",
                       message="You have already reviewed this shop")

    review = Review(
        id=uuid.uuid4().hex,
        shop_id=body.shop_id,
        user_id=user["id"],
        user_name=user.get("name", ""),
        rating=body.rating,
        comment=body.comment,
        photos=body.photos,
    )
    _reviews[review.id] = review
    return review


def _sorted(reviews: list[Review], sort: ReviewSort) -> list[Review]:
    newest_first = list(reversed(reviews))
    if sort == ReviewSort.oldest:
        return reviews
    if sort == ReviewSort.highest:
        return sorted(newest_first, key=lambda r: r.rating, reverse=True)
    if sort == ReviewSort.lowest:
        return sorted(newest_first, key=lambda r: r.rating)
    return newest_first


def reviews_for_shop(
    shop_id: str,
    page: int = 1,
    limit: int = 10,
    sort: ReviewSort = ReviewSort.newest,
) -> ReviewPage:
    reviews = [r for r in _reviews.values() if r.shop_id == shop_id]
    total = len(reviews)
    avg = sum(r.rating for r in reviews) / total if total else 0.0

    start = (page - 1) * limit
    return ReviewPage(
        reviews=_sorted(reviews, sort)[start:start + limit],
        pagination=Pagination(current=page, pages=math.ceil(total / limit), total=total),
        stats=ReviewStats(avg_rating=round(avg, 1), count=total),
    )


def reviews_for_shops(shop_ids: set[str]) -> list[Review]:
    """All reviews of the given shops, newest first."""
    return [r for r in reversed(list(_reviews.values())) if r.shop_id in shop_ids]


def update_review(review_id: str, body: ReviewUpdate, user: dict) -> Review:
    review = _require_review(review_id)
    if review.user_id != user["id"]:
        raise Forbidden("Not authorized to update this review")

    changes = body.model_dump(exclude_none=True)
    updated = review.model_copy(update={**changes, "updated_at": datetime.now()})
    _reviews[review_id] = updated
    return updated


def delete_review(review_id: str, user: dict) -> None:
    review = _require_review(review_id)
    if review.user_id != user["id"] and not _is_admin(user):
        raise Forbidden("Not authorized to delete this review")
    del _reviews[review_id]


def reply_to_review(review_id: str, body: ReplyRequest, user: dict) -> Review:
    review = _require_review(review_id)
    shop = get_shop_store().get(review.shop_id)
    is_owner = shop is not None and shop.owner_id == user["id"]
    if not is_owner and not _is_admin(user):
        raise Forbidden("Not authorized to reply to this review")

    review.reply = ReviewReply(text=body.text, date=datetime.now(), author_id=user["id"])
    review.updated_at = datetime.now()
    return review


def toggle_helpful(review_id: str, user: dict) -> HelpfulToggle:
    review = _require_review(review_id)
    was_helpful = user["id"] in review.helpful
    if was_helpful:
        review.helpful = [uid for uid in review.helpful if uid != user["id"]]
    else:
        review.helpful.append(user["id"])

    return HelpfulToggle(
        message="Removed from helpful" if was_helpful else "Marked as helpful",
        helpful_count=len(review.helpful),
        is_helpful=not was_helpful,
    )


def delete_reviews_for_shop(shop_id: str) -> int:
    doomed = [rid for rid, r in _reviews.items() if r.shop_id == shop_id]
    for rid in doomed:
        del _reviews[rid]
    return len(doomed)


def count_reviews() -> int:
    return len(_reviews)


def clear_reviews() -> None:
    _reviews.clear()
