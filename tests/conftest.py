import copy
import os
from types import SimpleNamespace
from typing import Any, Dict, List, NamedTuple, Optional

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

# main.py builds a module-level app from the environment on import
os.environ.setdefault("SANITY_PROJECT_ID", "test-project")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")

from config import Settings  # noqa: E402
from database import ensure_indexes  # noqa: E402
from email_client import EmailDeliveryError  # noqa: E402


# ---------------------- In-memory MongoDB ----------------------
_MISSING = object()


def _get(doc: Any, path: str) -> Any:
    cur = doc
    for part in path.split("."):
        if isinstance(cur, list):
            try:
                cur = cur[int(part)]
            except (ValueError, IndexError):
                return _MISSING
        elif isinstance(cur, dict):
            if part not in cur:
                return _MISSING
            cur = cur[part]
        else:
            return _MISSING
    return cur


def _matches_value(value: Any, cond: Any) -> bool:
    if isinstance(cond, dict) and any(k.startswith("$") for k in cond):
        for op, arg in cond.items():
            if op == "$exists":
                if (value is not _MISSING) != bool(arg):
                    return False
            elif op == "$lt":
                if value is _MISSING or not value < arg:
                    return False
            else:
                raise NotImplementedError(op)
        return True
    return value == cond


def _matches(doc: Dict[str, Any], flt: Optional[Dict[str, Any]]) -> bool:
    return all(_matches_value(_get(doc, k), v) for k, v in (flt or {}).items())


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self.docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self.docs.sort(key=lambda d: (d.get(key) is None, d.get(key)), reverse=direction < 0)
        return self

    def limit(self, n: int) -> "FakeCursor":
        self.docs = self.docs[:n]
        return self

    def __iter__(self):
        return iter(self.docs)


class FakeCollection:
    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.unique = set()
        self.indexes: List[Any] = []

    def create_index(self, keys, unique=False, **kwargs):
        field = keys if isinstance(keys, str) else keys[0][0]
        self.indexes.append((field, unique, kwargs))
        if unique:
            self.unique.add(field)
        return f"{field}_1"

    def _check_unique(self, doc: Dict[str, Any]) -> None:
        for field in self.unique:
            value = doc.get(field)
            if any(other.get(field) == value for other in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error: {field} {value!r}")

    def _apply(self, doc: Dict[str, Any], update: Dict[str, Any], inserting: bool) -> None:
        for op, fields in update.items():
            if op == "$set":
                doc.update(copy.deepcopy(fields))
            elif op == "$setOnInsert":
                if inserting:
                    doc.update(copy.deepcopy(fields))
            elif op == "$unset":
                for k in fields:
                    doc.pop(k, None)
            elif op == "$push":
                for k, v in fields.items():
                    doc.setdefault(k, []).append(v)
            elif op == "$pull":
                for k, cond in fields.items():
                    if k in doc:
                        doc[k] = [x for x in doc[k] if not _matches_value(x, cond)]
            else:
                raise NotImplementedError(op)

    def insert_one(self, doc: Dict[str, Any]):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def find_one(self, flt: Optional[Dict[str, Any]] = None):
        for doc in self.docs:
            if _matches(doc, flt):
                return copy.deepcopy(doc)
        return None

    def find(self, flt: Optional[Dict[str, Any]] = None) -> FakeCursor:
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, flt)])

    def count_documents(self, flt: Optional[Dict[str, Any]] = None) -> int:
        return sum(1 for d in self.docs if _matches(d, flt))

    def update_one(self, flt: Dict[str, Any], update: Dict[str, Any], upsert: bool = False):
        for doc in self.docs:
            if _matches(doc, flt):
                self._apply(doc, update, inserting=False)
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if not upsert:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
        doc = {
            k: copy.deepcopy(v)
            for k, v in flt.items()
            if "." not in k and not k.startswith("$") and not isinstance(v, dict)
        }
        self._apply(doc, update, inserting=True)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc["_id"])


class FakeDatabase:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


# ---------------------- External collaborators ----------------------
class FakeContentClient:
    """Serves canned query results in order and records every call."""

    def __init__(self, *results: Any):
        self.results = list(results)
        self.calls: List[tuple] = []

    def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((query, dict(params or {})))
        if not self.results:
            return None
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return copy.deepcopy(result)

    @property
    def last_query(self) -> str:
        return self.calls[-1][0]

    @property
    def last_params(self) -> Dict[str, Any]:
        return self.calls[-1][1]


class SentEmail(NamedTuple):
    sender: str
    to: str
    subject: str
    html: str


class RecordingEmailClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[SentEmail] = []

    def send(self, sender, to, subject, html):
        if self.fail:
            raise EmailDeliveryError("Email provider returned 500: unavailable")
        self.sent.append(SentEmail(sender, to, subject, html))
        return f"msg_{len(self.sent)}"

    def to(self, address: str) -> List[SentEmail]:
        return [m for m in self.sent if m.to == address]


class RecordingMarketingClient:
    configured = True

    def __init__(self):
        self.calls: List[tuple] = []

    def subscribe(self, email, first_name=None, interests=None, source=None):
        self.calls.append(("subscribe", email, first_name, interests, source))

    def set_status(self, email, status):
        self.calls.append(("set_status", email, status))

    def update_preferences(self, email, interests=None, frequency=None):
        self.calls.append(("update_preferences", email, interests, frequency))

    def unsubscribe(self, email):
        self.calls.append(("unsubscribe", email))


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self.payload = payload
        self.text = text

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """Stands in for ``requests.Session``; records each request."""

    def __init__(self, response: Any = None):
        self.response = response if response is not None else FakeResponse(200, {})
        self.requests: List[Dict[str, Any]] = []

    def _respond(self, **kwargs):
        self.requests.append(kwargs)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def get(self, url, **kwargs):
        return self._respond(method="GET", url=url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond(method="POST", url=url, **kwargs)

    def request(self, method, url, **kwargs):
        return self._respond(method=method, url=url, **kwargs)


# ---------------------- Fixtures ----------------------
@pytest.fixture
def settings():
    return Settings(
        sanity_project_id="test-project",
        resend_api_key="re_test_key",
        site_url="https://equitybydesign.com/",
        confirmation_secret="confirmation-secret-for-tests",
        jwt_secret="jwt-secret-for-tests",
        rate_limit_max=3,
        rate_limit_window_seconds=3600,
    )


@pytest.fixture
def db():
    database = FakeDatabase()
    ensure_indexes(database)
    return database


@pytest.fixture
def email_client():
    return RecordingEmailClient()


@pytest.fixture
def marketing():
    return RecordingMarketingClient()


@pytest.fixture
def contact_data():
    return {
        "name": "Ada Lovelace",
        "email": "Ada@Lovelace.org",
        "phone": "+44 20 7946 0000",
        "organization": "Analytical Engines Trust",
        "organizationType": "nonprofit-education",
        "organizationSize": "small",
        "projectType": ["accessibility-audit", "web-design"],
        "projectDescription": (
            "We need a full redesign of our donor portal so that screen-reader "
            "users can give without calling us."
        ),
        "goals": "Double online giving from disabled donors.",
        "timeline": "urgent",
        "budget": "25k-50k",
        "marketingConsent": True,
        "_honeypot": "",
    }


@pytest.fixture
def newsletter_data():
    return {
        "email": "Grace@Hopper.net",
        "firstName": "Grace",
        "interests": ["accessibility", "research"],
        "source": "footer",
        "gdprConsent": True,
    }
