"""
Auth Service Integration Tests — run against a deployed instance

Set AUTH_SERVICE_URL (e.g. http://localhost:5000) to enable; skipped otherwise.

Tests:
  1. Register → login → refresh → validate-token against the real database
  2. Concurrent registrations with the same email (exactly one wins)
  3. Profile upsert-merge through the public API
  4. Health endpoint
"""
import asyncio
import os
import uuid
import pytest
import httpx

# ─── Config ────────────────────────────────────────────────────────────────────
AUTH_URL = os.getenv("AUTH_SERVICE_URL")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not AUTH_URL, reason="AUTH_SERVICE_URL not set"),
]


def _new_student() -> dict:
    unique = uuid.uuid4().hex[:8]
    return {
        "student_id": f"IT-{unique}",
        "username": f"it_{unique}",
        "email": f"it_{unique}@iut.edu.bd",
        "password": "TestPass123!",
        "role": "student",
    }


# ─── Test 1: Token lifecycle ───────────────────────────────────────────────────
async def test_register_login_refresh_validate():
    student = _new_student()
    async with httpx.AsyncClient(base_url=AUTH_URL, timeout=10.0) as client:
        r = await client.post("/auth/register", json=student)
        assert r.status_code == 201, f"Register failed: {r.text}"
        user_id = r.json()["user_id"]

        r = await client.post("/auth/login", json={"email": student["email"], "password": student["password"]})
        assert r.status_code == 200, f"Login failed: {r.text}"
        tokens = r.json()
        assert tokens["user_id"] == user_id

        # The refresh-token record is written in the background after login returns.
        await asyncio.sleep(0.5)
        r = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert r.status_code == 200, f"Refresh failed: {r.text}"

        r = await client.get(f"/user/validate-token/{r.json()['access_token']}")
        assert r.status_code == 200
        assert r.json()["user_id"] == user_id


# ─── Test 2: Uniqueness under concurrency ──────────────────────────────────────
async def test_concurrent_registrations_single_winner():
    """
    Fire 10 registrations sharing one email but distinct student IDs and
    usernames. The database constraint must let exactly one through.
    """
    email = f"race_{uuid.uuid4().hex[:8]}@iut.edu.bd"

    async def register_one(client: httpx.AsyncClient):
        return await client.post("/auth/register", json={**_new_student(), "email": email})

    async with httpx.AsyncClient(base_url=AUTH_URL, timeout=30.0) as client:
        responses = await asyncio.gather(*[register_one(client) for _ in range(10)])

    created = [r for r in responses if r.status_code == 201]
    conflicts = [r for r in responses if r.status_code == 409]
    assert len(created) == 1, f"Expected one winner, got {len(created)}"
    assert len(conflicts) == 9


# ─── Test 3: Profile merge ─────────────────────────────────────────────────────
async def test_profile_merge_over_http():
    async with httpx.AsyncClient(base_url=AUTH_URL, timeout=10.0) as client:
        r = await client.post("/auth/register", json=_new_student())
        assert r.status_code == 201
        url = f"/auth/user/{r.json()['user_id']}"

        await client.put(url, json={"first_name": "A", "tuition_beneficiary_status": True})
        r = await client.put(url, json={"last_name": "B"})

    data = r.json()["data"]
    assert (data["first_name"], data["last_name"]) == ("A", "B")
    assert data["tuition_beneficiary_status"] is False


# ─── Test 4: Health ────────────────────────────────────────────────────────────
async def test_health_endpoint_returns_200():
    async with httpx.AsyncClient(base_url=AUTH_URL, timeout=10.0) as client:
        r = await client.get("/health")
    assert r.status_code == 200, f"/health returned {r.status_code}"
    assert r.json()["status"] == "healthy"
