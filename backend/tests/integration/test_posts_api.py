"""Post endpoints over HTTP, with a focus on draft visibility."""

from __future__ import annotations

import uuid

import pytest

from blogapi.models.post import PostStatus
from blogapi.models.user import UserRole
from tests.factories.post import PostFactory
from tests.factories.user import UserFactory
from tests.helpers.assertions import assert_problem
from tests.helpers.auth import auth_header

POSTS = "/api/v1/posts"


@pytest.fixture()
def author(app):
    return UserFactory()


@pytest.fixture()
def draft(author):
    return PostFactory(author=author, status=PostStatus.DRAFT, slug="draft-post-0000abcd")


@pytest.fixture()
def published(author):
    return PostFactory(author=author, status=PostStatus.PUBLISHED, slug="live-post-0000abcd")


class TestCreate:
    def test_create_draft(self, client, author):
        resp = client.post(
            POSTS,
            headers=auth_header(author),
            json={"title": "Hello World", "content": "A first post with content."},
        )

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["status"] == "draft"
        assert data["slug"].startswith("hello-world-")
        assert data["author"]["id"] == str(author.id)
        assert data["view_count"] == 0

    def test_requires_authentication(self, client):
        resp = client.post(POSTS, json={"title": "Hello World", "content": "Content here."})
        assert_problem(resp, 401, "unauthorized")

    def test_validation(self, client, author):
        resp = client.post(POSTS, headers=auth_header(author), json={"title": "Hi"})
        body = assert_problem(resp, 422, "validation_error")
        assert {"title", "content"} <= set(body["details"]["errors"])


class TestDraftVisibility:
    def test_anonymous_sees_only_published(self, client, draft, published):
        resp = client.get(POSTS)

        assert [p["id"] for p in resp.get_json()["data"]] == [str(published.id)]
        assert resp.get_json()["meta"]["total"] == 1

    def test_admin_listing_includes_drafts(self, client, draft, published):
        admin = UserFactory(role=UserRole.ADMIN)
        resp = client.get(POSTS, headers=auth_header(admin))
        assert resp.get_json()["meta"]["total"] == 2

    @pytest.mark.parametrize("by", ["id", "slug"])
    def test_draft_hidden_from_anonymous_and_strangers(self, client, draft, by):
        url = f"{POSTS}/{draft.id}" if by == "id" else f"{POSTS}/slug/{draft.slug}"
        stranger = UserFactory()

        assert_problem(client.get(url), 404, "not_found")
        assert_problem(client.get(url, headers=auth_header(stranger)), 404, "not_found")

    def test_draft_visible_to_owner_and_admin(self, client, draft, author):
        admin = UserFactory(role=UserRole.ADMIN)

        assert client.get(f"{POSTS}/{draft.id}", headers=auth_header(author)).status_code == 200
        assert client.get(f"{POSTS}/{draft.id}", headers=auth_header(admin)).status_code == 200

    def test_published_is_public_and_counts_views(self, client, published):
        client.get(f"{POSTS}/{published.id}")
        resp = client.get(f"{POSTS}/slug/{published.slug}")

        assert resp.status_code == 200
        assert resp.get_json()["data"]["view_count"] == 2

    def test_unknown_post(self, client):
        assert_problem(client.get(f"{POSTS}/{uuid.uuid4()}"), 404, "not_found")


class TestMineAndSearch:
    def test_my_posts_include_drafts(self, client, author, draft, published):
        PostFactory()  # someone else's

        resp = client.get(f"{POSTS}/my", headers=auth_header(author))

        assert resp.get_json()["meta"]["total"] == 2

    def test_search_is_published_only(self, client, author):
        PostFactory(author=author, title="Learning Flask", status=PostStatus.PUBLISHED)
        PostFactory(author=author, title="Flask drafts", status=PostStatus.DRAFT)

        resp = client.get(f"{POSTS}/search?q=flask")

        assert [p["title"] for p in resp.get_json()["data"]] == ["Learning Flask"]

    def test_search_requires_query(self, client):
        body = assert_problem(client.get(f"{POSTS}/search"), 422, "validation_error")
        assert "q" in body["details"]["errors"]


class TestUpdateAndDelete:
    def test_owner_updates(self, client, author, draft):
        resp = client.put(
            f"{POSTS}/{draft.id}",
            headers=auth_header(author),
            json={"title": "Renamed post", "status": "published"},
        )

        data = resp.get_json()["data"]
        assert data["status"] == "published"
        assert data["slug"].startswith("renamed-post-")

    def test_stranger_cannot_update_or_delete(self, client, published):
        stranger = UserFactory()

        put = client.put(f"{POSTS}/{published.id}", headers=auth_header(stranger), json={"title": "Mine now"})
        delete = client.delete(f"{POSTS}/{published.id}", headers=auth_header(stranger))

        assert_problem(put, 403, "forbidden")
        assert_problem(delete, 403, "forbidden")

    def test_owner_deletes(self, client, author, published):
        resp = client.delete(f"{POSTS}/{published.id}", headers=auth_header(author))

        assert resp.status_code == 204
        assert_problem(client.get(f"{POSTS}/{published.id}"), 404, "not_found")

    def test_invalid_status(self, client, author, draft):
        resp = client.put(f"{POSTS}/{draft.id}", headers=auth_header(author), json={"status": "deleted"})
        assert_problem(resp, 422, "validation_error")
