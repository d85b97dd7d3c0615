import pytest

from contentsite.domain.content.collections import (
    ACHIEVEMENTS,
    ANNOUNCEMENTS,
    CAREERS,
    GALLERY,
    PROGRAMS,
    RESEARCH,
    UpdatePolicy,
    get_collection,
    resolve,
)
from contentsite.domain.content.errors import UnknownCollectionError
from contentsite.domain.content.models import parse_timestamp
from contentsite.domain.content.slugs import slugify


def test_reversed_ordering_does_not_mutate_input():
    records = [{"slug": "a"}, {"slug": "b"}, {"slug": "c"}]

    assert [r["slug"] for r in RESEARCH.order(records)] == ["c", "b", "a"]
    assert [r["slug"] for r in records] == ["a", "b", "c"]


def test_date_desc_puts_undated_last_and_is_stable():
    records = [
        {"slug": "undated-1"},
        {"slug": "old", "date": "2023-01-01"},
        {"slug": "new", "date": "2024-06-01T10:00:00"},
        {"slug": "undated-2", "date": ""},
        {"slug": "garbage", "date": "not a date"},
    ]

    ordered = [r["slug"] for r in ANNOUNCEMENTS.order(records)]

    assert ordered == ["new", "old", "undated-1", "undated-2", "garbage"]


def test_date_desc_accepts_utc_z_suffix():
    records = [
        {"slug": "old", "date": "2023-01-01"},
        {"slug": "undated"},
        {"slug": "stamped", "date": "2024-06-30T00:00:00.000Z"},
        {"slug": "later", "date": "2024-06-30T00:00:01z"},
    ]

    ordered = [r["slug"] for r in ANNOUNCEMENTS.order(records)]

    assert ordered == ["later", "stamped", "old", "undated"]
    assert parse_timestamp("2024-06-30T00:00:00Z") == parse_timestamp("2024-06-30T00:00:00+00:00")


def test_careers_order_by_closing_date():
    records = [
        {"slug": "a", "closingDate": "2024-01-01"},
        {"slug": "b", "closingDate": "2025-01-01"},
    ]

    assert [r["slug"] for r in CAREERS.order(records)] == ["b", "a"]


def test_unordered_collection_keeps_store_order():
    records = [{"id": "2"}, {"id": "1"}]

    assert GALLERY.order(records) == records


def test_update_policies():
    assert PROGRAMS.update_policy is UpdatePolicy.UPSERT
    assert RESEARCH.update_policy is UpdatePolicy.UPSERT
    assert CAREERS.update_policy is UpdatePolicy.REJECT
    assert ACHIEVEMENTS.update_policy is UpdatePolicy.REJECT


def test_normalise_mirrors_slug_into_id():
    assert PROGRAMS.normalise({"slug": "x", "id": "other"}) == {"slug": "x", "id": "x"}
    assert RESEARCH.normalise({"slug": "x", "id": "other"}) == {"slug": "x", "id": "other"}


def test_identifier_of_ignores_blank_values():
    assert GALLERY.identifier_of({"id": ""}) is None
    assert GALLERY.identifier_of({"id": 7}) == "7"
    assert GALLERY.identifier_of("not a record") is None


def test_unknown_collection_raises():
    with pytest.raises(UnknownCollectionError):
        get_collection("users")


def test_resolve_defaults_to_all_collections():
    names = [c.name for c in resolve()]

    assert names == [
        "programs",
        "research",
        "testimonials",
        "gallery",
        "careers",
        "announcements",
        "achievements",
    ]
    assert [c.name for c in resolve(["gallery"])] == ["gallery"]


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Senior Tutor", "senior-tutor"),
        ("  Lab Assistant (Part-time)! ", "lab-assistant-part-time"),
        ("Math -- Tutor", "math-tutor"),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected
