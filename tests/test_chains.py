import pytest

from utils.chains import ChainStore, StoreError, event_id


def test_empty_by_default(store):
    assert store.all() == []
    assert store.count() == 0


def test_insert_and_read(store):
    store.insert("1:1", "5678", "hola que tal")
    assert store.all() == ["hola que tal"]
    assert store.chain("5678") == ["hola que tal"]
    assert store.chain("x") == []


def test_insert_same_event_replaces_content(store):
    store.insert("1:1", "5678", "primera")
    store.insert("1:1", "5678", "editada")
    assert store.all() == ["editada"]
    assert store.count() == 1


def test_chains_are_separate(store):
    store.insert("1:1", "a", "uno")
    store.insert("1:2", "b", "dos")
    store.insert("1:3", "a", "tres")
    assert sorted(store.chain("a")) == ["tres", "uno"]
    assert store.count("a") == 2
    assert store.count("b") == 1
    assert store.count() == 3


def test_delete_by_id(store):
    store.insert("1:1", "5678", "9012")
    assert store.delete_id("1:1") == 1
    assert store.delete_id("1:1") == 0
    assert store.all() == []


def test_delete_by_chain(store):
    store.insert("1:1", "5678", "x y")
    store.insert("1:2", "5678", "y z")
    store.insert("1:3", "other", "keep me")
    assert store.delete_chain("5678") == 2
    assert store.all() == ["keep me"]


def test_persists_between_instances(tmp_path):
    path = str(tmp_path / "c.sqlite")
    ChainStore(path).insert("1:1", "a", "hola")
    assert ChainStore(path).all() == ["hola"]


def test_unopenable_path_raises_store_error(tmp_path):
    with pytest.raises(StoreError) as ei:
        ChainStore(str(tmp_path))
    assert ei.value.op == "init"


def test_event_id_includes_chat():
    assert event_id(-100, 7) == "-100:7"
