from datetime import datetime, timedelta, timezone

from database import create_document, get_documents
from schemas import AdminUser


def test_create_document_stamps_times(db):
    doc_id = create_document(db, "adminuser", AdminUser(email="ada@lovelace.org", password_hash="x"))
    stored = db["adminuser"].find_one({"email": "ada@lovelace.org"})

    assert str(stored["_id"]) == doc_id
    assert stored["created_at"] == stored["updated_at"]
    assert stored["role"] == "editor"


def test_get_documents_newest_first_with_string_ids(db):
    now = datetime.now(timezone.utc)
    for i in range(3):
        create_document(db, "contactsubmission", {"name": f"n{i}", "created_at": now + timedelta(minutes=i)})

    docs = get_documents(db, "contactsubmission", limit=2)

    assert [d["name"] for d in docs] == ["n2", "n1"]
    assert all(isinstance(d["_id"], str) for d in docs)


def test_indexes(db):
    assert "email" in db["newslettersubscriber"].unique
    assert "key" in db["ratelimit"].unique
    assert ("expires_at", False, {"expireAfterSeconds": 0}) in db["ratelimit"].indexes
