"""
CityGuide Backend — API Endpoint Tests
========================================

What:  End-to-end requests through the FastAPI app: the response envelope,
       error mapping, auth, places, reviews, favorites and uploads.
How:   httpx AsyncClient over ASGITransport (see conftest.test_client).
"""

import uuid

import pytest

PASSWORD = "secret123"

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    + b"\x00" * 64
)


async def register(client, name="Asha", email=None):
    """Registers through the API and returns (headers, user json)."""
    email = email or f"{name.lower()}-{uuid.uuid4().hex[:6]}@example.com"
    response = await client.post(
        "/api/auth/register", json={"name": name, "email": email, "password": PASSWORD}
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {"Authorization": f"Bearer {data['token']}"}, data["user"]


class TestHealthAndErrors:
    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Server is running"
        assert body["data"]["status"] == "healthy"
        assert body["data"]["database"] == "connected"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/nowhere")
        assert response.status_code == 404
        body = response.json()
        assert body == {
            "success": False,
            "error": "not_found",
            "message": "Route not found",
            "requestId": response.headers["X-Request-ID"],
        }

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, test_client):
        headers, _ = await register(test_client)
        response = await test_client.post("/api/favorites", json={"placeId": "not-a-uuid"}, headers=headers)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["details"]["errors"][0]["field"] == "placeId"


class TestAuthApi:
    @pytest.mark.asyncio
    async def test_register_login_me(self, test_client):
        _, user = await register(test_client, name="Kabir", email="Kabir@Example.com")
        assert user["email"] == "kabir@example.com"
        assert user["role"] == "user"
        assert "passwordHash" not in user

        response = await test_client.post(
            "/api/auth/login", json={"email": "kabir@example.com", "password": PASSWORD}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        token = body["data"]["token"]

        me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["name"] == "Kabir"

    @pytest.mark.asyncio
    async def test_duplicate_registration(self, test_client):
        await register(test_client, email="dup@example.com")
        response = await test_client.post(
            "/api/auth/register",
            json={"name": "Again", "email": "DUP@example.com", "password": PASSWORD},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists with this email"

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client):
        await register(test_client, email="pw@example.com")
        response = await test_client.post(
            "/api/auth/login", json={"email": "pw@example.com", "password": "nope-nope"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, test_client):
        response = await test_client.get("/api/places")
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. No token provided."

    @pytest.mark.asyncio
    async def test_invalid_token_is_403(self, test_client):
        response = await test_client.get("/api/places", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 403
        assert response.json()["message"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_banned_user_is_403(self, test_client, seed, auth_headers):
        banned = await seed.user(is_active=False)
        response = await test_client.get("/api/auth/me", headers=auth_headers(banned))
        assert response.status_code == 403
        assert response.json()["error"] == "account_banned"

    @pytest.mark.asyncio
    async def test_token_for_deleted_user_is_401(self, test_client, auth_headers):
        from cityguide.models.user import User

        ghost = User(id=uuid.uuid4(), name="Ghost", email="ghost@example.com", role="user")
        response = await test_client.get("/api/auth/me", headers=auth_headers(ghost))
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"


class TestPlacesApi:
    @pytest.mark.asyncio
    async def test_list_with_pagination(self, test_client, seed):
        for i in range(3):
            await seed.place(name=f"Place {i}", rating=float(i + 2), city="Chennai")
        headers, _ = await register(test_client)

        response = await test_client.get("/api/places?city=Chennai&limit=2", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body["data"]] == ["Place 2", "Place 1"]
        assert body["pagination"] == {
            "currentPage": 1,
            "totalPages": 2,
            "totalItems": 3,
            "hasNext": True,
            "hasPrev": False,
        }
        assert "averageRating" in body["data"][0]
        assert "totalReviews" in body["data"][0]

    @pytest.mark.asyncio
    async def test_search_and_cities(self, test_client, seed):
        await seed.place(name="Hussain Sagar", category="park", city="Hyderabad", rating=4.0)
        await seed.place(name="Paradise Biryani", category="restaurant", city="Hyderabad", rating=4.6)
        await seed.place(name="Aga Khan Palace", category="museum", city="Pune", rating=4.4)
        headers, _ = await register(test_client)

        response = await test_client.get(
            "/api/places/search?keyword=BIRYANI&minRating=4.5", headers=headers
        )
        assert [p["name"] for p in response.json()["data"]] == ["Paradise Biryani"]

        cities = await test_client.get("/api/cities", headers=headers)
        assert cities.json()["data"] == ["Hyderabad", "Pune"]

    @pytest.mark.asyncio
    async def test_invalid_sort_is_400(self, test_client):
        headers, _ = await register(test_client)
        response = await test_client.get("/api/places?sort=email", headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_place_is_404(self, test_client):
        headers, _ = await register(test_client)
        response = await test_client.get(f"/api/places/{uuid.uuid4()}", headers=headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Place not found"


class TestReviewsApi:
    @pytest.mark.asyncio
    async def test_review_flow(self, test_client, seed, auth_headers):
        owner = await seed.user(name="Owner")
        place = await seed.place(owner_id=owner.id)
        ratings = [5, 3, 4]
        for rating in ratings:
            headers, _ = await register(test_client)
            response = await test_client.post(
                f"/api/places/{place.id}/reviews",
                json={"rating": rating, "comment": "Visited last week"},
                headers=headers,
            )
            assert response.status_code == 200, response.text
            assert response.json()["message"] == "Review added successfully"

        data = response.json()["data"]
        assert data["totalReviews"] == 3
        assert data["averageRating"] == 4.0
        assert data["rating"] == 4.0

        # Same user again
        again = await test_client.post(
            f"/api/places/{place.id}/reviews",
            json={"rating": 1, "comment": "Changed my mind"},
            headers=headers,
        )
        assert again.status_code == 400
        assert again.json()["message"] == "You have already reviewed this place"

        reviews = await test_client.get(f"/api/places/{place.id}/reviews", headers=headers)
        review_id = reviews.json()["data"]["reviews"][0]["id"]
        assert reviews.json()["data"]["totalReviews"] == 3

        not_owner = await test_client.post(
            f"/api/places/{place.id}/reviews/{review_id}/reply",
            json={"reply": "Thanks"},
            headers=headers,
        )
        assert not_owner.status_code == 403

        reply = await test_client.post(
            f"/api/places/{place.id}/reviews/{review_id}/reply",
            json={"reply": "Thanks for visiting"},
            headers=auth_headers(owner),
        )
        assert reply.status_code == 200
        assert reply.json()["data"]["reviews"][0]["ownerReply"] == "Thanks for visiting"

        hijack = await test_client.post(
            f"/api/places/{place.id}/reviews/{review_id}/reply",
            json={"reply": "Closed forever"},
            headers=headers,
        )
        assert hijack.status_code == 403
        assert hijack.json()["message"] == "Only the place owner can reply to reviews"

        after = await test_client.get(f"/api/places/{place.id}/reviews", headers=headers)
        kept = after.json()["data"]["reviews"][0]
        assert kept["ownerReply"] == "Thanks for visiting"

    @pytest.mark.asyncio
    async def test_rating_out_of_range(self, test_client, seed):
        place = await seed.place()
        headers, _ = await register(test_client)
        response = await test_client.post(
            f"/api/places/{place.id}/reviews", json={"rating": 6, "comment": "Wow"}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Rating must be between 1 and 5"

    @pytest.mark.parametrize("rating", [True, "4", 4.0, 4.5])
    @pytest.mark.asyncio
    async def test_non_integer_rating_rejected(self, test_client, seed, rating):
        place = await seed.place()
        headers, _ = await register(test_client)
        response = await test_client.post(
            f"/api/places/{place.id}/reviews",
            json={"rating": rating, "comment": "Nice spot"},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Rating must be an integer between 1 and 5"

        stored = await test_client.get(f"/api/places/{place.id}/reviews", headers=headers)
        assert stored.json()["data"]["totalReviews"] == 0

    @pytest.mark.asyncio
    async def test_missing_comment(self, test_client, seed):
        place = await seed.place()
        headers, _ = await register(test_client)
        response = await test_client.post(
            f"/api/places/{place.id}/reviews", json={"rating": 4}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Rating and comment are required"


class TestFavoritesApi:
    @pytest.mark.asyncio
    async def test_favorites_flow(self, test_client, seed):
        place = await seed.place(name="Ganga Ghat")
        headers, _ = await register(test_client)

        added = await test_client.post("/api/favorites", json={"placeId": str(place.id)}, headers=headers)
        assert added.status_code == 201
        assert added.json()["message"] == "Added to favorites"
        favorite_id = added.json()["data"]["id"]

        duplicate = await test_client.post(
            "/api/favorites", json={"placeId": str(place.id)}, headers=headers
        )
        assert duplicate.status_code == 400
        assert duplicate.json()["message"] == "Place already in favorites"

        listed = await test_client.get("/api/favorites", headers=headers)
        items = listed.json()["data"]
        assert len(items) == 1
        assert items[0]["favoriteId"] == favorite_id
        assert items[0]["id"] == str(place.id)
        assert items[0]["name"] == "Ganga Ghat"

        other_headers, _ = await register(test_client, name="Other")
        foreign = await test_client.delete(f"/api/favorites/{favorite_id}", headers=other_headers)
        assert foreign.status_code == 404

        removed = await test_client.delete(f"/api/favorites/{favorite_id}", headers=headers)
        assert removed.status_code == 200
        assert removed.json()["message"] == "Removed from favorites"


class TestUploadsApi:
    @pytest.mark.asyncio
    async def test_upload_and_serve(self, test_client):
        headers, _ = await register(test_client)
        content = PNG_BYTES

        response = await test_client.post(
            "/api/upload-image",
            files={"image": ("storefront.png", content, "image/png")},
            headers=headers,
        )

        assert response.status_code == 200, response.text
        data = response.json()["data"]
        assert data["imageUrl"].startswith("http://test/uploads/")
        assert data["imageUrl"].endswith(".png")

        served = await test_client.get(f"/uploads/{data['filename']}")
        assert served.status_code == 200
        assert served.content == content
        assert served.headers["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_non_image_rejected(self, test_client):
        headers, _ = await register(test_client)
        response = await test_client.post(
            "/api/upload-image",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed!"

    @pytest.mark.asyncio
    async def test_script_disguised_as_png_rejected(self, test_client):
        pytest.importorskip("magic")
        headers, _ = await register(test_client)
        response = await test_client.post(
            "/api/upload-image",
            files={"image": ("evil.png", b"<?php system($_GET['c']); ?>", "image/png")},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed!"

    @pytest.mark.asyncio
    async def test_missing_file(self, test_client):
        headers, _ = await register(test_client)
        response = await test_client.post("/api/upload-image", headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No image file provided"
