"""
Comment endpoint tests: listing by post, creation, validation and the
author-only delete rule.
"""
import pytest
from httpx import AsyncClient

MISSING_ID = "0123456789abcdef01234567"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_post(client: AsyncClient, actor) -> str:
    cat = await client.post("/api/v1/categories", json={"name": "Tech"}, headers=actor.headers)
    assert cat.status_code == 201
    resp = await client.post(
        "/api/v1/posts",
        data={"title": "Hi", "content": "World", "category": cat.json()["id"]},
        headers=actor.headers,
    )
    assert resp.status_code == 201
    return resp.json()["id"]


async def _comment(client: AsyncClient, actor, post_id: str, content: str = "nice") -> dict:
    resp = await client.post(
        f"/api/v1/comments/{post_id}", json={"content": content}, headers=actor.headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Create + list
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_and_list_comment(async_client: AsyncClient, make_user):
    u1 = await make_user("u1")
    post_id = await _create_post(async_client, u1)

    comment = await _comment(async_client, u1, post_id, "nice")
    assert comment["content"] == "nice"
    assert comment["post_id"] == post_id
    assert comment["user"] == {"id": u1.id, "username": "u1"}

    resp = await async_client.get(f"/api/v1/comments/{post_id}")
    assert resp.status_code == 200
    comments = resp.json()
    assert len(comments) == 1
    # Only id and username are exposed, never the email.
    assert comments[0]["user"] == {"id": u1.id, "username": "u1"}


@pytest.mark.asyncio
async def test_list_comments_in_creation_order(async_client: AsyncClient, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post_id = await _create_post(async_client, alice)
    for actor, text in [(alice, "first"), (bob, "second"), (alice, "third")]:
        await _comment(async_client, actor, post_id, text)

    comments = (await async_client.get(f"/api/v1/comments/{post_id}")).json()
    assert [c["content"] for c in comments] == ["first", "second", "third"]
    assert [c["user"]["username"] for c in comments] == ["alice", "bob", "alice"]


@pytest.mark.asyncio
async def test_list_comments_only_for_that_post(async_client: AsyncClient, make_user):
    alice = await make_user()
    post_id = await _create_post(async_client, alice)
    await _comment(async_client, alice, post_id)
    await _comment(async_client, alice, MISSING_ID)

    assert len((await async_client.get(f"/api/v1/comments/{post_id}")).json()) == 1


@pytest.mark.asyncio
async def test_list_comments_bad_post_id(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/comments/not-an-id")
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "post_id"


@pytest.mark.asyncio
async def test_list_comments_for_missing_post_is_empty(async_client: AsyncClient):
    resp = await async_client.get(f"/api/v1/comments/{MISSING_ID}")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_comment_on_missing_post_is_accepted(async_client: AsyncClient, make_user):
    """Post existence is not checked; the orphaned comment is stored."""
    alice = await make_user()
    comment = await _comment(async_client, alice, MISSING_ID, "hello?")
    assert comment["post_id"] == MISSING_ID


@pytest.mark.asyncio
async def test_comment_blank_content(async_client: AsyncClient, make_user):
    alice = await make_user()
    post_id = await _create_post(async_client, alice)
    resp = await async_client.post(
        f"/api/v1/comments/{post_id}", json={"content": "   "}, headers=alice.headers
    )
    assert resp.status_code == 400
    assert [e["field"] for e in resp.json()["errors"]] == ["content"]


@pytest.mark.asyncio
async def test_comment_reports_every_invalid_field(async_client: AsyncClient, make_user):
    alice = await make_user()
    resp = await async_client.post("/api/v1/comments/bad-id", json={}, headers=alice.headers)
    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"post_id", "content"}


@pytest.mark.asyncio
async def test_comment_requires_auth(async_client: AsyncClient):
    resp = await async_client.post(f"/api/v1/comments/{MISSING_ID}", json={"content": "hi"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_author_can_delete_comment(async_client: AsyncClient, make_user):
    alice = await make_user()
    post_id = await _create_post(async_client, alice)
    comment = await _comment(async_client, alice, post_id)

    resp = await async_client.delete(f"/api/v1/comments/{comment['id']}", headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Comment deleted"}

    again = await async_client.delete(f"/api/v1/comments/{comment['id']}", headers=alice.headers)
    assert again.status_code == 404
    assert (await async_client.get(f"/api/v1/comments/{post_id}")).json() == []


@pytest.mark.asyncio
async def test_other_user_cannot_delete_comment(async_client: AsyncClient, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post_id = await _create_post(async_client, alice)
    comment = await _comment(async_client, alice, post_id)

    resp = await async_client.delete(f"/api/v1/comments/{comment['id']}", headers=bob.headers)
    assert resp.status_code == 403
    assert resp.json() == {"error": "Not authorized"}

    remaining = (await async_client.get(f"/api/v1/comments/{post_id}")).json()
    assert [c["id"] for c in remaining] == [comment["id"]]


@pytest.mark.asyncio
async def test_delete_missing_comment(async_client: AsyncClient, make_user):
    alice = await make_user()
    resp = await async_client.delete(f"/api/v1/comments/{MISSING_ID}", headers=alice.headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_comment_bad_id(async_client: AsyncClient, make_user):
    alice = await make_user()
    resp = await async_client.delete("/api/v1/comments/123", headers=alice.headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_comment_requires_auth(async_client: AsyncClient, make_user):
    alice = await make_user()
    post_id = await _create_post(async_client, alice)
    comment = await _comment(async_client, alice, post_id)

    resp = await async_client.delete(f"/api/v1/comments/{comment['id']}")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_deleting_post_keeps_its_comments(async_client: AsyncClient, make_user):
    alice = await make_user()
    post_id = await _create_post(async_client, alice)
    await _comment(async_client, alice, post_id)

    await async_client.delete(f"/api/v1/posts/{post_id}", headers=alice.headers)
    assert len((await async_client.get(f"/api/v1/comments/{post_id}")).json()) == 1
