"""Tests for the members example — forwards, redirects, errors, and misses."""

from perch.testing import TestClient


class TestPages:
    async def test_home_is_index(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/")
            assert response.status == 200
            assert "Welcome to the club" in response.text
            assert "3 members" in response.text

    async def test_members_listing(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/members")
            assert response.status == 200
            assert "Ada Lovelace" in response.text
            assert "Edsger Dijkstra" in response.text

    async def test_members_filtered(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/members?role=treasurer")
            assert "Grace Hopper" in response.text
            assert "Ada Lovelace" not in response.text

    async def test_member_detail(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/member-detail?id=1")
            assert response.status == 200
            assert "<h1>Ada Lovelace</h1>" in response.text
            assert response.header("cache-control") == "no-store"


class TestFinalizedResponses:
    async def test_detail_without_id_redirects(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/member-detail")
            assert response.status == 302
            assert response.header("location") == "/pages/members"

    async def test_unknown_member(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/member-detail?id=99")
            assert response.status == 404
            assert response.text == "No such member"

    async def test_permanent_redirect(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/old-directory")
            assert response.status == 301


class TestMisses:
    async def test_unknown_page_uses_404_handler(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/treasury")
            assert response.status == 404
            assert response.text == "Nothing lives at /pages/treasury"

    async def test_malformed_path_falls_through(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/pages/members/extra")
            assert response.status == 404

    async def test_static_file(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/static/club.css")
            assert response.status == 200
            assert "font-family" in response.text
