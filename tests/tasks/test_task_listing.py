"""Tests for task list filtering, search, sorting and pagination."""

from datetime import datetime, timedelta, timezone

from httpx import AsyncClient

from conftest import create_category, create_tag, create_task


async def _titles(client: AsyncClient, **params) -> list[str]:
    response = await client.get("/api/tasks", params=params)
    assert response.status_code == 200, response.text
    return [t["title"] for t in response.json()["content"]]


class TestFilters:
    async def test_filter_by_status(self, authed_client: AsyncClient):
        done = await create_task(authed_client, title="Done")
        await create_task(authed_client, title="Open")
        await authed_client.patch(f"/api/tasks/{done['id']}/status", json={"status": "COMPLETED"})
        assert await _titles(authed_client, status="COMPLETED") == ["Done"]
        assert await _titles(authed_client, status="pending") == ["Open"]

    async def test_filter_by_priority(self, authed_client: AsyncClient):
        await create_task(authed_client, title="Hi", priority="HIGH")
        await create_task(authed_client, title="Lo", priority="LOW")
        assert await _titles(authed_client, priority="HIGH") == ["Hi"]

    async def test_filter_by_category(self, authed_client: AsyncClient):
        category = await create_category(authed_client)
        await create_task(authed_client, title="In", categoryId=category["id"])
        await create_task(authed_client, title="Out")
        assert await _titles(authed_client, categoryId=category["id"]) == ["In"]

    async def test_filter_by_tag(self, authed_client: AsyncClient):
        tag = await create_tag(authed_client)
        await create_task(authed_client, title="Tagged", tagIds=[tag["id"]])
        await create_task(authed_client, title="Plain")
        assert await _titles(authed_client, tagId=tag["id"]) == ["Tagged"]

    async def test_search_title_and_description_case_insensitive(self, authed_client: AsyncClient):
        await create_task(authed_client, title="Buy MILK")
        await create_task(authed_client, title="Errand", description="get milk and eggs")
        await create_task(authed_client, title="Unrelated")
        assert sorted(await _titles(authed_client, search="milk")) == ["Buy MILK", "Errand"]

    async def test_search_treats_wildcards_literally(self, authed_client: AsyncClient):
        await create_task(authed_client, title="100% done")
        await create_task(authed_client, title="1000 things")
        assert await _titles(authed_client, search="0%") == ["100% done"]

    async def test_filters_are_combined(self, authed_client: AsyncClient):
        category = await create_category(authed_client)
        await create_task(authed_client, title="Match", priority="HIGH", categoryId=category["id"])
        await create_task(authed_client, title="Wrong priority", priority="LOW", categoryId=category["id"])
        await create_task(authed_client, title="No category", priority="HIGH")
        assert await _titles(authed_client, priority="HIGH", categoryId=category["id"]) == ["Match"]

    async def test_only_own_tasks_listed(self, authed_client: AsyncClient, other_user):
        await create_task(authed_client, title="Mine")
        await authed_client.post("/api/tasks", json={"title": "Bob's"}, headers=other_user["headers"])
        assert await _titles(authed_client) == ["Mine"]

    async def test_invalid_filter_values(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/tasks", params={"status": "NOPE", "priority": "NOPE"})
        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"status", "priority"}


class TestSortingAndPaging:
    async def test_default_sort_newest_first(self, authed_client: AsyncClient):
        for title in ("one", "two", "three"):
            await create_task(authed_client, title=title)
        assert await _titles(authed_client) == ["three", "two", "one"]

    async def test_sort_by_title(self, authed_client: AsyncClient):
        for title in ("b", "c", "a"):
            await create_task(authed_client, title=title)
        assert await _titles(authed_client, sort="title,asc") == ["a", "b", "c"]
        assert await _titles(authed_client, sort="title,desc") == ["c", "b", "a"]

    async def test_sort_by_priority_rank(self, authed_client: AsyncClient):
        await create_task(authed_client, title="med", priority="MEDIUM")
        await create_task(authed_client, title="high", priority="HIGH")
        await create_task(authed_client, title="low", priority="LOW")
        assert await _titles(authed_client, sort="priority,desc") == ["high", "med", "low"]

    async def test_sort_by_due_date_nulls_last(self, authed_client: AsyncClient):
        now = datetime.now(timezone.utc)
        await create_task(authed_client, title="none")
        await create_task(authed_client, title="later", dueDate=(now + timedelta(days=3)).isoformat())
        await create_task(authed_client, title="soon", dueDate=(now + timedelta(days=1)).isoformat())
        assert await _titles(authed_client, sort="dueDate,asc") == ["soon", "later", "none"]

    async def test_invalid_sort(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/tasks", params={"sort": "password,asc"})
        assert response.status_code == 400
        response = await authed_client.get("/api/tasks", params={"sort": "title,sideways"})
        assert response.status_code == 400

    async def test_pagination(self, authed_client: AsyncClient):
        for i in range(5):
            await create_task(authed_client, title=f"t{i}")
        response = await authed_client.get("/api/tasks", params={"page": 1, "size": 2, "sort": "title,asc"})
        data = response.json()
        assert [t["title"] for t in data["content"]] == ["t2", "t3"]
        assert data["page"] == 1
        assert data["size"] == 2
        assert data["totalElements"] == 5
        assert data["totalPages"] == 3

    async def test_page_past_end_is_empty(self, authed_client: AsyncClient):
        await create_task(authed_client)
        response = await authed_client.get("/api/tasks", params={"page": 5})
        data = response.json()
        assert data["content"] == []
        assert data["totalElements"] == 1

    async def test_default_page_size(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/tasks")
        data = response.json()
        assert data["size"] == 20
        assert data["totalPages"] == 0

    async def test_size_bounds(self, authed_client: AsyncClient):
        assert (await authed_client.get("/api/tasks", params={"size": 0})).status_code == 400
        assert (await authed_client.get("/api/tasks", params={"size": 101})).status_code == 400
        assert (await authed_client.get("/api/tasks", params={"page": -1})).status_code == 400
