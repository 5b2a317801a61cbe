import json

import pytest

from src.storage.store import Store
from src.utils.errors import StoreClosedError


class TestCollection:
    def test_insert_assigns_id(self, store):
        alerts = store.collection("alerts")
        record_id = alerts.insert({"coin_id": "bitcoin"})
        assert record_id
        assert alerts.get_by_id(record_id) == {"coin_id": "bitcoin", "id": record_id}

    def test_list_filters_on_all_fields(self, store):
        wl = store.collection("watchlists")
        wl.insert({"user_id": "u1", "coin_id": "bitcoin"})
        wl.insert({"user_id": "u1", "coin_id": "ethereum"})
        wl.insert({"user_id": "u2", "coin_id": "bitcoin"})
        assert len(wl.list()) == 3
        assert len(wl.list({"user_id": "u1"})) == 2
        assert len(wl.list({"user_id": "u1", "coin_id": "bitcoin"})) == 1
        assert wl.find_one({"user_id": "u3"}) is None

    def test_update_merges_fields(self, store):
        p = store.collection("portfolios")
        record_id = p.insert({"amount": 1, "coin_id": "bitcoin"})
        updated = p.update(record_id, {"amount": 3})
        assert updated == {"amount": 3, "coin_id": "bitcoin", "id": record_id}
        assert p.get_by_id(record_id)["amount"] == 3

    def test_update_missing_returns_none(self, store):
        assert store.collection("portfolios").update("nope", {"amount": 1}) is None

    def test_delete(self, store):
        p = store.collection("portfolios")
        record_id = p.insert({"amount": 1})
        assert p.delete(record_id) is True
        assert p.delete(record_id) is False
        assert p.get_by_id(record_id) is None

    def test_empty_collection(self, store):
        assert store.collection("users").list() == []

    def test_persists_as_json_file(self, store):
        store.collection("users").insert({"email": "a@b.c"})
        with open(store.data_dir / "users.json") as f:
            data = json.load(f)
        assert data[0]["email"] == "a@b.c"

    def test_unknown_collection(self, store):
        with pytest.raises(KeyError):
            store.collection("things")


class TestStoreLifecycle:
    def test_closed_store_rejects_access(self, tmp_path):
        s = Store(tmp_path)
        with pytest.raises(StoreClosedError):
            s.collection("users")

    def test_collection_unusable_after_close(self, tmp_path):
        s = Store(tmp_path).open()
        users = s.collection("users")
        s.close()
        with pytest.raises(StoreClosedError):
            users.list()

    def test_data_survives_reopen(self, tmp_path):
        with Store(tmp_path) as s:
            record_id = s.collection("alerts").insert({"coin_id": "bitcoin"})
        assert not s.is_open
        with Store(tmp_path) as s:
            assert s.collection("alerts").get_by_id(record_id)["coin_id"] == "bitcoin"

    def test_separate_stores_do_not_share_state(self, tmp_path):
        a = Store(tmp_path / "a").open()
        b = Store(tmp_path / "b")
        assert a.is_open
        assert not b.is_open
