"""Tests for the document store and snapshot persistence."""
import json

from docs_server.models import Document
from docs_server.search_index import build_index
from docs_server.snapshot import dump_snapshot, load_snapshot, save_snapshot
from docs_server.store import DocumentStore


def make_doc(key: str, content: str = "<p>body</p>") -> Document:
    return Document(key=key, content=content, title=key.title(), permalink=f"/{key}.html")


def test_put_replaces_whole_document():
    store = DocumentStore()
    store.put("a", make_doc("a", "<p>old</p>"))
    store.put("a", make_doc("a", "<p>new</p>"))

    assert store.get("a").content == "<p>new</p>"
    assert len(store) == 1
    assert store.get("missing") is None


def test_put_does_not_mutate_mapping_held_by_readers():
    store = DocumentStore()
    store.put("a", make_doc("a"))
    before = store._documents

    store.put("b", make_doc("b"))

    assert list(before) == ["a"]
    assert store.keys() == ["a", "b"]
    assert "b" in store


def test_publish_swaps_corpus_and_index_together():
    store = DocumentStore()
    corpus = [make_doc("a"), make_doc("b")]
    index = build_index(corpus)

    store.publish(corpus, index)
    published_corpus, published_index = store.published()

    assert [d.key for d in published_corpus] == ["a", "b"]
    assert published_index is index
    assert len(store.index) == 2

    store.publish([make_doc("c")], build_index([make_doc("c")]))

    # the earlier pair is untouched
    assert [d.key for d in published_corpus] == ["a", "b"]
    assert store.index.refs() == ["c"]


def test_snapshot_written_and_reloaded(tmp_path):
    corpus = [make_doc("b"), make_doc("a", "<p>dispatcher</p>")]
    path = tmp_path / "nested" / "index.json"

    save_snapshot(path, corpus, build_index(corpus))
    data = json.loads(path.read_text())
    loaded = load_snapshot(path)

    assert set(data) == {"docs", "index"}
    assert [d["key"] for d in data["docs"]] == ["a", "b"]
    docs, index = loaded
    assert {d.key for d in docs} == {"a", "b"}
    assert index.search("dispatcher")[0][0] == "a"
    assert not (tmp_path / "nested" / "index.json.tmp").exists()


def test_snapshot_serialization_ignores_corpus_order():
    a, b = make_doc("a"), make_doc("b")

    assert dump_snapshot([a, b], build_index([a, b])) == dump_snapshot([b, a], build_index([b, a]))


def test_missing_or_corrupt_snapshot_is_ignored(tmp_path):
    path = tmp_path / "index.json"
    assert load_snapshot(path) is None

    path.write_text("{not json")
    assert load_snapshot(path) is None

    path.write_text(json.dumps({"docs": [], "index": {"lengths": {}}}))
    assert load_snapshot(path) is None
