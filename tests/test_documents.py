"""Unit tests for the document store collections."""

import types
from datetime import datetime, timezone

import pytest
from sqlalchemy import event

from portal_api.db import Base
from portal_api.documents import Collection, DocumentStore, is_valid_object_id, new_object_id
from portal_api.errors import DuplicateKey, StoreUnavailable
from portal_api.models import DocumentORM


class TestObjectIds:
    def test_new_ids_are_well_formed_and_distinct(self):
        ids = {new_object_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(is_valid_object_id(i) for i in ids)

    @pytest.mark.parametrize("value", ["not-an-id", "", "abc", "g" * 24, "a" * 25, None, 123])
    def test_malformed_ids(self, value):
        assert not is_valid_object_id(value)

    def test_uppercase_hex_is_well_formed(self):
        assert is_valid_object_id("ABCDEF0123456789abcdef01")


class TestCollection:
    def test_insert_assigns_id_and_find_one_returns_document(self, store):
        coll = store.collection("things")
        result = coll.insert_one({"name": "a", "_id": "ignored"})
        assert result.acknowledged
        assert is_valid_object_id(result.inserted_id)
        doc = coll.find_one({"_id": result.inserted_id})
        assert doc == {"_id": result.inserted_id, "name": "a"}

    def test_datetimes_are_stored_as_iso_strings(self, store):
        coll = store.collection("things")
        when = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        doc_id = coll.insert_one({"at": when}).inserted_id
        stored = coll.find_one({"_id": doc_id})["at"]
        assert isinstance(stored, str)
        assert datetime.fromisoformat(stored.replace("Z", "+00:00")) == when

    def test_find_keeps_insertion_order_and_filters_by_equality(self, store):
        coll = store.collection("things")
        for name, kind in [("a", "x"), ("b", "y"), ("c", "x")]:
            coll.insert_one({"name": name, "kind": kind})
        assert [d["name"] for d in coll.find()] == ["a", "b", "c"]
        assert [d["name"] for d in coll.find({"kind": "x"})] == ["a", "c"]
        assert coll.find({"kind": "z"}) == []

    def test_collections_are_isolated(self, store):
        store.collection("one").insert_one({"v": 1})
        assert store.collection("two").find() == []
        assert store.collection("one").count_documents() == 1

    def test_in_filter_on_ids_skips_missing(self, store):
        coll = store.collection("things")
        a = coll.insert_one({"name": "a"}).inserted_id
        coll.insert_one({"name": "b"})
        c = coll.insert_one({"name": "c"}).inserted_id
        found = coll.find({"_id": {"$in": [a, c, new_object_id()]}})
        assert [d["name"] for d in found] == ["a", "c"]
        assert coll.find({"_id": {"$in": []}}) == []

    def test_in_filter_on_body_fields(self, store):
        coll = store.collection("things")
        coll.insert_one({"n": 1})
        coll.insert_one({"n": 2})
        coll.insert_one({})
        assert [d["n"] for d in coll.find({"n": {"$in": [2, 3]}})] == [2]

    def test_unsupported_operator_is_rejected(self, store):
        coll = store.collection("things")
        coll.insert_one({"n": 1})
        with pytest.raises(ValueError):
            coll.find({"n": {"$gt": 0}})

    def test_update_sets_and_unsets(self, store):
        coll = store.collection("things")
        doc_id = coll.insert_one({"a": 1, "b": 2}).inserted_id
        result = coll.update_one({"_id": doc_id}, {"$set": {"a": 10, "c": 3}, "$unset": {"b": ""}})
        assert (result.matched_count, result.modified_count) == (1, 1)
        assert coll.find_one({"_id": doc_id}) == {"_id": doc_id, "a": 10, "c": 3}

    def test_update_without_change_reports_no_modification(self, store):
        coll = store.collection("things")
        doc_id = coll.insert_one({"a": 1}).inserted_id
        result = coll.update_one({"_id": doc_id}, {"$set": {"a": 1}})
        assert (result.matched_count, result.modified_count) == (1, 0)

    def test_update_missing_document_does_not_upsert(self, store):
        coll = store.collection("things")
        result = coll.update_one({"_id": new_object_id()}, {"$set": {"a": 1}})
        assert (result.matched_count, result.modified_count) == (0, 0)
        assert coll.count_documents() == 0

    def test_update_rejects_id_changes(self, store):
        coll = store.collection("things")
        doc_id = coll.insert_one({"a": 1}).inserted_id
        with pytest.raises(ValueError):
            coll.update_one({"_id": doc_id}, {"$set": {"_id": new_object_id()}})

    def test_delete_one_counts(self, store):
        coll = store.collection("things")
        doc_id = coll.insert_one({"a": 1}).inserted_id
        assert coll.delete_one({"_id": doc_id}).deleted_count == 1
        assert coll.delete_one({"_id": doc_id}).deleted_count == 0

    def test_unique_key_is_enforced_per_collection(self, store):
        store.collection("subs").insert_one({"email": "a@x.com"}, unique_key="a@x.com")
        with pytest.raises(DuplicateKey):
            store.collection("subs").insert_one({"email": "a@x.com"}, unique_key="a@x.com")
        # same key in another collection is fine
        store.collection("other").insert_one({"email": "a@x.com"}, unique_key="a@x.com")
        assert store.collection("subs").count_documents() == 1

    def test_id_lookups_ignore_hex_case(self, store):
        coll = store.collection("things")
        doc_id = coll.insert_one({"name": "a"}).inserted_id
        assert coll.find_one({"_id": doc_id.upper()})["_id"] == doc_id
        assert [d["_id"] for d in coll.find({"_id": {"$in": [doc_id.upper()]}})] == [doc_id]
        assert coll.update_one({"_id": doc_id.upper()}, {"$set": {"name": "b"}}).modified_count == 1
        assert coll.delete_one({"_id": doc_id.upper()}).deleted_count == 1

    def test_string_filters_only_load_matching_rows(self, store):
        coll = store.collection("jobs")
        for i in range(5):
            coll.insert_one({"postedBy": f"user{i}@x.com"})
        loaded = []

        def on_load(target, context):
            loaded.append(target.doc_id)

        event.listen(DocumentORM, "load", on_load)
        try:
            exact = coll.find({"postedBy": "user3@x.com"})
            either = coll.find({"postedBy": {"$in": ["user1@x.com", "user4@x.com"]}})
        finally:
            event.remove(DocumentORM, "load", on_load)
        assert [d["postedBy"] for d in exact] == ["user3@x.com"]
        assert [d["postedBy"] for d in either] == ["user1@x.com", "user4@x.com"]
        assert len(loaded) == 3

    def test_string_filter_does_not_match_other_types(self, store):
        coll = store.collection("things")
        coll.insert_one({"n": 5})
        coll.insert_one({"n": "5"})
        assert [d["n"] for d in coll.find({"n": "5"})] == ["5"]
        assert [d["n"] for d in coll.find({"n": 5})] == [5]

    def test_sql_failures_surface_as_store_unavailable(self, store):
        store.collection("things").insert_one({"a": 1})
        Base.metadata.drop_all(store.engine)
        with pytest.raises(StoreUnavailable):
            store.collection("things").find()


class TestConcurrentUpdates:
    @pytest.fixture
    def file_url(self, tmp_path):
        return f"sqlite:///{tmp_path / 'documents.db'}"

    def test_overlapping_updates_keep_both_fields(self, file_url, monkeypatch):
        store = DocumentStore(file_url)
        rival = DocumentStore(file_url)
        store.init()
        try:
            coll = store.collection("jobs")
            doc_id = coll.insert_one({"title": "T"}).inserted_id
            original_rows = Collection._rows
            interleaved = []

            def rows_then_rival_write(self, session, filter, lock=False):
                rows = original_rows(self, session, filter, lock)
                if lock and not interleaved:
                    # another writer commits between our read and our write
                    interleaved.append(True)
                    rival.collection("jobs").update_one({"_id": doc_id}, {"$set": {"b": 2}})
                return rows

            monkeypatch.setattr(coll, "_rows", types.MethodType(rows_then_rival_write, coll))
            result = coll.update_one({"_id": doc_id}, {"$set": {"a": 1}})

            assert interleaved == [True]
            assert (result.matched_count, result.modified_count) == (1, 1)
            assert coll.find_one({"_id": doc_id}) == {"_id": doc_id, "title": "T", "a": 1, "b": 2}
        finally:
            rival.close()
            store.close()

    def test_gives_up_after_repeated_conflicts(self, store, monkeypatch):
        from portal_api import documents

        coll = store.collection("jobs")
        doc_id = coll.insert_one({"title": "T"}).inserted_id

        def always_conflict(*args, **kwargs):
            raise documents._WriteConflict("version mismatch")

        monkeypatch.setattr(coll, "_update_once", always_conflict)
        with pytest.raises(StoreUnavailable):
            coll.update_one({"_id": doc_id}, {"$set": {"a": 1}})
