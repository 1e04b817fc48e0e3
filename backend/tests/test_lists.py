import pytest

from gello.exceptions import DataServiceError, ValidationError
from gello.services.lists import ListService

from tests.conftest import auth_headers


@pytest.fixture
def three_lists(db, board_setup):
    board_id = board_setup["board"]["id"]
    first = board_setup["list"]
    second = db.add("lists", board_id=board_id, name="Doing", position=1)
    third = db.add("lists", board_id=board_id, name="Done", position=2)
    return board_id, [first, second, third]


class TestReorder:
    async def test_reorders_in_one_call(self, db, three_lists, manager):
        board_id, (a, b, c) = three_lists

        updated = await ListService(db).reorder_lists(
            board_id, [(c["id"], 0), (a["id"], 1), (b["id"], 2)], manager["id"]
        )

        assert updated == 3
        assert [row["name"] for row in await db.select("lists", match={"board_id": board_id}, order_by=[("position", False)])] == [
            "Done",
            "To Do",
            "Doing",
        ]
        assert [name for name, _ in db.rpc_calls] == ["reorder_lists"]

    async def test_empty_input(self, db, board_setup):
        with pytest.raises(ValidationError):
            await ListService(db).reorder_lists(board_setup["board"]["id"], [])

    async def test_duplicates(self, db, three_lists):
        board_id, (a, _, _) = three_lists
        with pytest.raises(ValidationError, match="Duplicate"):
            await ListService(db).reorder_lists(board_id, [(a["id"], 0), (a["id"], 1)])

    async def test_list_from_another_board(self, db, three_lists, board_setup):
        board_id, (a, _, _) = three_lists
        other_board = db.add("boards", name="Other", team_id=board_setup["team"]["id"])
        foreign = db.add("lists", board_id=other_board["id"], name="Foreign")

        with pytest.raises(ValidationError, match="do not belong"):
            await ListService(db).reorder_lists(board_id, [(a["id"], 0), (foreign["id"], 1)])
        assert db.rpc_calls == []

    async def test_count_mismatch_is_a_data_error(self, db, three_lists, monkeypatch):
        board_id, (a, b, _) = three_lists

        async def short_rpc(function, params):
            return 1

        monkeypatch.setattr(db, "rpc", short_rpc)
        with pytest.raises(DataServiceError):
            await ListService(db).reorder_lists(board_id, [(a["id"], 1), (b["id"], 0)])


class TestListApi:
    def test_create_and_list_ordered(self, client, manager, board_setup):
        headers = auth_headers(client, manager)
        board_id = board_setup["board"]["id"]

        created = client.post(f"/api/lists/boards/{board_id}/lists", json={"name": "Review", "position": 5}, headers=headers)
        assert created.status_code == 201

        lists = client.get(f"/api/lists/boards/{board_id}/lists", headers=headers).json()
        assert [item["name"] for item in lists] == ["To Do", "Review"]

    def test_reorder_endpoint(self, client, manager, three_lists):
        board_id, (a, b, c) = three_lists
        response = client.patch(
            f"/api/lists/{a['id']}/reorder",
            json={
                "board_id": board_id,
                "list_positions": [
                    {"id": a["id"], "position": 2},
                    {"id": b["id"], "position": 1},
                    {"id": c["id"], "position": 0},
                ],
            },
            headers=auth_headers(client, manager),
        )
        assert response.status_code == 200
        assert response.json() == {"updated": 3}

    def test_delete_then_404(self, client, manager, board_setup):
        headers = auth_headers(client, manager)
        list_id = board_setup["list"]["id"]

        assert client.delete(f"/api/lists/{list_id}", headers=headers).status_code == 204
        assert client.get(f"/api/lists/{list_id}", headers=headers).status_code == 404
