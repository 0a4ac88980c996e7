from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from shoppilot.app import app
from shoppilot.reviews.store import count_reviews
from shoppilot.tests.helpers import login_admin, login_owner, login_user


def _client(login) -> TestClient:
    c = TestClient(app)
    login(c)
    return c


@pytest.fixture
def shop(make_shop):
    return make_shop("Suya Spot", categories=("Restaurant",))


@pytest.fixture
def review(shop):
    resp = _client(login_user).post(
        "/reviews", json={"shopId": shop.id, "rating": 4, "comment": "Spicy and good"},
    )
    return resp.json()["review"]


def test_create_review(shop):
    resp = _client(login_user).post(
        "/reviews", json={"shopId": shop.id, "rating": 5, "comment": "Great"},
    )
    assert resp.status_code == 201
    review = resp.json()["review"]
    assert review["rating"] == 5
    assert review["userName"] == "Demo User"
    assert review["helpful"] == []
    assert review["reply"] is None


def test_one_review_per_user_per_shop(shop, review):
    resp = _client(login_user).post(
        "/reviews", json={"shopId": shop.id, "rating": 1, "comment": "Again"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "You have already reviewed this shop"


def test_review_for_unknown_shop_is_404():
    resp = _client(login_user).post(
        "/reviews", json={"shopId": "nope", "rating": 3, "comment": "Hmm"},
    )
    assert resp.status_code == 404


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_must_be_one_to_five(shop, rating):
    resp = _client(login_user).post(
        "/reviews", json={"shopId": shop.id, "rating": rating, "comment": "x"},
    )
    assert resp.status_code == 422


def test_comment_length_is_capped(shop):
    resp = _client(login_user).post(
        "/reviews", json={"shopId": shop.id, "rating": 3, "comment": "x" * 501},
    )
    assert resp.status_code == 422


def test_list_reviews_with_stats_and_sorting(shop):
    _client(login_user).post("/reviews", json={"shopId": shop.id, "rating": 2, "comment": "Meh"})
    _client(login_owner).post("/reviews", json={"shopId": shop.id, "rating": 5, "comment": "Mine!"})

    c = TestClient(app)
    newest = c.get(f"/reviews/shop/{shop.id}").json()
    assert [r["rating"] for r in newest["reviews"]] == [5, 2]
    assert newest["stats"] == {"avgRating": 3.5, "count": 2}
    assert newest["pagination"] == {"current": 1, "pages": 1, "total": 2}

    lowest = c.get(f"/reviews/shop/{shop.id}", params={"sort": "lowest"}).json()
    assert [r["rating"] for r in lowest["reviews"]] == [2, 5]

    paged = c.get(f"/reviews/shop/{shop.id}", params={"limit": 1, "page": 2}).json()
    assert [r["rating"] for r in paged["reviews"]] == [2]
    assert paged["pagination"]["pages"] == 2


def test_list_reviews_for_shop_without_reviews(shop):
    body = TestClient(app).get(f"/reviews/shop/{shop.id}").json()
    assert body["reviews"] == []
    assert body["stats"] == {"avgRating": 0.0, "count": 0}


def test_author_updates_review(review):
    resp = _client(login_user).put(f"/reviews/{review['id']}", json={"rating": 2})
    assert resp.status_code == 200
    assert resp.json()["review"]["rating"] == 2
    assert resp.json()["review"]["comment"] == "Spicy and good"


def test_only_author_updates_review(review):
    resp = _client(login_admin).put(f"/reviews/{review['id']}", json={"rating": 1})
    assert resp.status_code == 403


def test_admin_deletes_any_review(review):
    resp = _client(login_admin).delete(f"/reviews/{review['id']}")
    assert resp.status_code == 200
    assert count_reviews() == 0


def test_stranger_cannot_delete_review(review):
    assert _client(login_owner).delete(f"/reviews/{review['id']}").status_code == 403


def test_shop_owner_replies(review):
    resp = _client(login_owner).post(f"/reviews/{review['id']}/reply", json={"text": "Thanks!"})
    assert resp.status_code == 200
    assert resp.json()["review"]["reply"]["text"] == "Thanks!"


def test_customer_cannot_reply(review):
    resp = _client(login_user).post(f"/reviews/{review['id']}/reply", json={"text": "Me too"})
    assert resp.status_code == 403


def test_helpful_toggles(review):
    c = _client(login_owner)
    first = c.post(f"/reviews/{review['id']}/helpful").json()
    assert first == {"message": "Marked as helpful", "helpfulCount": 1, "isHelpful": True}
    second = c.post(f"/reviews/{review['id']}/helpful").json()
    assert second == {"message": "Removed from helpful", "helpfulCount": 0, "isHelpful": False}


def test_unknown_review_is_404():
    assert _client(login_user).post("/reviews/nope/helpful").status_code == 404


def test_deleting_shop_removes_its_reviews(shop, review):
    _client(login_owner).delete(f"/shops/{shop.id}")
    assert count_reviews() == 0
