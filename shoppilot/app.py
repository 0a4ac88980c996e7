from __future__ import annotations

import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import dashboard_stats, platform_analytics, shop_analytics, shop_totals
from .analytics.store import record_event
from .auth.dependencies import get_current_user, require_admin, require_shop_owner, require_user
from .auth.models import LoginRequest, RegisterRequest, SuspendRequest
from .auth.users import authenticate, create_user, is_suspended, set_suspended
from .data_ingestion.ingest import load_sample_shops
from .errors import Conflict, Forbidden, NotFound, ShopPilotError
from .recommendations.models import RecommendationQuery, RecommendationResponse
from .recommendations.pipeline import recommend_shops
from .reviews.models import (
    HelpfulToggle,
    ReplyRequest,
    Review,
    ReviewCreate,
    ReviewPage,
    ReviewSort,
    ReviewUpdate,
)
from .reviews.store import (
    create_review,
    delete_review,
    delete_reviews_for_shop,
    reply_to_review,
    reviews_for_shop,
    toggle_helpful,
    update_review,
)
from .settings.service import get_settings_service
from .shops.config import DEFAULT_SEARCH_CONFIG
from .shops.hours import evaluate_status
from .shops.models import (
    AdminShopUpdate,
    Shop,
    ShopCreate,
    ShopListResponse,
    ShopResponse,
    ShopStatus,
    ShopUpdate,
)
from .shops.search import browse_shops, search_shops
from .shops.store import get_shop_store

logger = logging.getLogger(__name__)

_MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
_MAINTENANCE_EXEMPT = ("/auth/", "/admin/")


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_settings_service().initialize()
    if os.environ.get("SEED_SAMPLE_SHOPS", "").lower() in ("1", "true", "yes"):
        added = load_sample_shops()
        logger.info("Seeded %d sample shops", added)
    yield


app = FastAPI(title="ShopPilot API", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def maintenance_guard(request: Request, call_next):
    if (
        request.method in _MUTATING_METHODS
        and get_settings_service().get("maintenanceMode")
        and not request.url.path.startswith(_MAINTENANCE_EXEMPT)
        and (request.scope.get("session") or {}).get("user", {}).get("role") != "admin"
    ):
        return JSONResponse(
            status_code=503,
            content={"message": "Service under maintenance", "error": "maintenanceMode"},
        )
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info("%s %s -> %d", request.method, request.url.path, response.status_code)
    return response


# Added last so it wraps the middlewares above and they can read the session.
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "shoppilot-secret-change-in-production"),
)


@app.exception_handler(ShopPilotError)
async def shoppilot_error_handler(request: Request, exc: ShopPilotError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "error": exc.detail},
    )


def _get_shop_or_404(shop_id: str) -> Shop:
    shop = get_shop_store().get(shop_id)
    if shop is None:
        raise HTTPException(status_code=404, detail="Shop not found")
    return shop


def _can_manage(shop: Shop, user: dict) -> bool:
    return shop.owner_id == user["id"] or user.get("role") == "admin"


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "ShopPilot Backend API", "status": "running"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/register", status_code=201)
def register(body: RegisterRequest, request: Request) -> dict:
    user = create_user(body.name, body.email, body.password, body.role)
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if is_suspended(user["id"]):
        raise HTTPException(status_code=403, detail="Account suspended")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Shop endpoints ───────────────────────────────────────────────────────


@app.get("/shops")
def list_shops(
    lat: float | None = None,
    lng: float | None = None,
    radius: float = DEFAULT_SEARCH_CONFIG.browse_radius_m,
    category: str | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(
        default=DEFAULT_SEARCH_CONFIG.default_page_size,
        ge=1,
        le=DEFAULT_SEARCH_CONFIG.max_page_size,
    ),
) -> dict[str, Any]:
    shops, total = browse_shops(lat, lng, radius, category, search, page=page, limit=limit)
    return {"shops": shops, "count": len(shops), "total": total, "page": page}


@app.get("/shops/nearby", response_model=ShopListResponse)
def nearby_shops(
    lat: float | None = None,
    lng: float | None = None,
    radius: float = DEFAULT_SEARCH_CONFIG.browse_radius_m,
    category: str | None = None,
) -> ShopListResponse:
    shops = search_shops(lat, lng, radius, category=category)
    return ShopListResponse(shops=shops, count=len(shops))


@app.get("/shops/owner/{owner_id}", response_model=ShopListResponse)
def shops_by_owner(owner_id: str) -> ShopListResponse:
    shops = get_shop_store().by_owner(owner_id)
    return ShopListResponse(shops=shops, count=len(shops))


@app.post("/shops", status_code=201, response_model=ShopResponse)
def create_shop(body: ShopCreate, user: dict = Depends(require_shop_owner)) -> ShopResponse:
    store = get_shop_store()
    settings = get_settings_service()

    max_shops = settings.get("maxShopsPerUser")
    if user["role"] != "admin" and max_shops and len(store.by_owner(user["id"])) >= max_shops:
        raise Conflict(f"Shop limit of {max_shops} reached", message="Maximum shops per user reached")

    shop = Shop(
        id=uuid.uuid4().hex,
        owner_id=user["id"],
        approved=bool(settings.get("autoApproveShops")),
        **body.model_dump(),
    )
    store.add(shop)
    logger.info("Shop %s created by %s (approved=%s)", shop.id, user["id"], shop.approved)
    return ShopResponse(message="Shop created successfully", shop=shop)


@app.get("/shops/{shop_id}", response_model=ShopResponse)
def get_shop(shop_id: str, request: Request) -> ShopResponse:
    shop = _get_shop_or_404(shop_id)
    user = get_current_user(request)
    try:
        record_event("view", shop.id, user["id"] if user else None)
    except Exception:
        logger.warning("Failed to record view for shop %s", shop.id, exc_info=True)
    return ShopResponse(shop=shop)


@app.put("/shops/{shop_id}", response_model=ShopResponse)
def update_shop(
    shop_id: str,
    body: ShopUpdate,
    user: dict = Depends(require_user),
) -> ShopResponse:
    shop = _get_shop_or_404(shop_id)
    if not _can_manage(shop, user):
        raise Forbidden("Not authorized to update this shop")
    updated = get_shop_store().update(shop_id, body.model_dump(exclude_none=True))
    return ShopResponse(message="Shop updated successfully", shop=updated)


@app.delete("/shops/{shop_id}")
def delete_shop(shop_id: str, user: dict = Depends(require_user)) -> dict:
    shop = _get_shop_or_404(shop_id)
    if not _can_manage(shop, user):
        raise Forbidden("Not authorized to delete this shop")
    get_shop_store().delete(shop_id)
    delete_reviews_for_shop(shop_id)
    return {"message": "Shop deleted successfully"}


@app.post("/shops/{shop_id}/click")
def track_click(shop_id: str, request: Request) -> dict:
    shop = _get_shop_or_404(shop_id)
    user = get_current_user(request)
    record_event("click", shop.id, user["id"] if user else None)
    return {"message": "Click tracked successfully"}


@app.get("/shops/{shop_id}/status", response_model=ShopStatus)
def shop_status(shop_id: str) -> ShopStatus:
    shop = _get_shop_or_404(shop_id)
    return evaluate_status(shop.opening_hours)


# ── Recommendations ──────────────────────────────────────────────────────


@app.post("/recommend", response_model=RecommendationResponse)
def recommend(body: RecommendationQuery) -> RecommendationResponse:
    logger.info("Recommendation request: %r at (%s, %s)", body.query, body.lat, body.lng)
    return recommend_shops(body)


# ── Reviews ──────────────────────────────────────────────────────────────


@app.post("/reviews", status_code=201)
def add_review(body: ReviewCreate, user: dict = Depends(require_user)) -> dict:
    review = create_review(body, user)
    return {"message": "Review created successfully", "review": review}


@app.get("/reviews/shop/{shop_id}", response_model=ReviewPage)
def list_reviews(
    shop_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: ReviewSort = ReviewSort.newest,
) -> ReviewPage:
    return reviews_for_shop(shop_id, page=page, limit=limit, sort=sort)


@app.put("/reviews/{review_id}")
def edit_review(review_id: str, body: ReviewUpdate, user: dict = Depends(require_user)) -> dict:
    review = update_review(review_id, body, user)
    return {"message": "Review updated successfully", "review": review}


@app.delete("/reviews/{review_id}")
def remove_review(review_id: str, user: dict = Depends(require_user)) -> dict:
    delete_review(review_id, user)
    return {"message": "Review deleted successfully"}


@app.post("/reviews/{review_id}/reply")
def reply_review(review_id: str, body: ReplyRequest, user: dict = Depends(require_user)) -> dict:
    review: Review = reply_to_review(review_id, body, user)
    return {"message": "Reply added successfully", "review": review}


@app.post("/reviews/{review_id}/helpful", response_model=HelpfulToggle)
def helpful_review(review_id: str, user: dict = Depends(require_user)) -> HelpfulToggle:
    return toggle_helpful(review_id, user)


# ── Shop owner dashboard ─────────────────────────────────────────────────


@app.get("/shop-owner/dashboard/stats")
def owner_dashboard(user: dict = Depends(require_shop_owner)) -> dict:
    return dashboard_stats(get_shop_store().by_owner(user["id"]))


@app.get("/shop-owner/my-shops")
def owner_shops(user: dict = Depends(require_shop_owner)) -> dict:
    shops = get_shop_store().by_owner(user["id"])
    return {
        "shops": [
            {"shop": shop, "analytics": shop_totals(shop.id)}
            for shop in shops
        ],
    }


@app.get("/shop-owner/shops/{shop_id}/analytics")
def owner_shop_analytics(
    shop_id: str,
    period: int = Query(default=7, ge=1, le=365),
    user: dict = Depends(require_shop_owner),
) -> dict:
    shop = _get_shop_or_404(shop_id)
    if not _can_manage(shop, user):
        raise Forbidden("Access denied", message="Access denied")
    return shop_analytics(shop_id, period_days=period)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/admin/shops", response_model=ShopListResponse)
def admin_shops(user: dict = Depends(require_admin)) -> ShopListResponse:
    shops = get_shop_store().all()
    return ShopListResponse(shops=shops, count=len(shops))


@app.put("/admin/shops/{shop_id}", response_model=ShopResponse)
def admin_update_shop(
    shop_id: str,
    body: AdminShopUpdate,
    user: dict = Depends(require_admin),
) -> ShopResponse:
    _get_shop_or_404(shop_id)
    updated = get_shop_store().update(shop_id, body.model_dump(exclude_none=True))
    return ShopResponse(message="Shop updated successfully", shop=updated)


@app.put("/admin/shops/{shop_id}/approve", response_model=ShopResponse)
def admin_approve_shop(shop_id: str, user: dict = Depends(require_admin)) -> ShopResponse:
    _get_shop_or_404(shop_id)
    shop = get_shop_store().update(shop_id, {"approved": True})
    logger.info("Shop approved: %s", shop.name)
    return ShopResponse(message="Shop approved successfully", shop=shop)


@app.delete("/admin/shops/{shop_id}")
def admin_delete_shop(shop_id: str, user: dict = Depends(require_admin)) -> dict:
    if get_shop_store().delete(shop_id) is None:
        raise NotFound("Shop not found", message="Shop not found")
    delete_reviews_for_shop(shop_id)
    return {"message": "Shop deleted successfully"}


@app.put("/admin/users/{user_id}/suspend")
def admin_suspend_user(
    user_id: str,
    body: SuspendRequest,
    user: dict = Depends(require_admin),
) -> dict:
    updated = set_suspended(user_id, body.suspend)
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    action = "suspended" if body.suspend else "unsuspended"
    return {"message": f"User {action} successfully", "user": updated}


@app.get("/admin/settings")
def admin_get_settings(user: dict = Depends(require_admin)) -> dict:
    return {"settings": get_settings_service().all()}


@app.put("/admin/settings")
def admin_update_settings(
    body: dict[str, Any],
    user: dict = Depends(require_admin),
) -> dict:
    updated = get_settings_service().update(body)
    return {"message": "Settings updated successfully", "settings": updated}


@app.get("/admin/analytics")
def admin_analytics(user: dict = Depends(require_admin)) -> dict:
    return platform_analytics()
