import json

import pytest

from contentsite.domain.content.files import FileReader
from contentsite.domain.content.migration import CollectionStatus, MigrationState, migrate_content


@pytest.fixture
def seeded(write_doc):
    write_doc("programs", "robotics", "title: Robotics")
    write_doc("programs", "coding", "title: Coding")
    write_doc("jobs", "tutor", "title: Tutor")
    write_doc("research", "paper", "title: Paper\npdf: /files/paper.pdf")


def _outcomes(report):
    return {o.collection: o for o in report.outcomes}


@pytest.mark.asyncio
async def test_migrates_every_collection_into_empty_store(store, fake_redis, content_root, seeded):
    report = await migrate_content(store, FileReader(content_root))

    assert report.ok
    assert report.state is MigrationState.CONNECTED
    assert report.migrated["programs"] == 2
    assert report.migrated["careers"] == 1
    assert report.migrated["gallery"] == 0
    programs = json.loads(await fake_redis.get("tcc:programs"))
    assert [p["slug"] for p in programs] == ["coding", "robotics"]
    assert programs[0]["id"] == "coding"
    assert json.loads(await fake_redis.get("tcc:gallery")) == []


@pytest.mark.asyncio
async def test_existing_data_is_skipped_without_force(store, fake_redis, content_root, seeded):
    await fake_redis.set("tcc:programs", json.dumps([{"slug": "edited-in-admin"}]))

    report = await migrate_content(store, FileReader(content_root), ["programs", "careers"])

    outcomes = _outcomes(report)
    assert outcomes["programs"].status is CollectionStatus.SKIPPED
    assert outcomes["programs"].existing == 1
    assert outcomes["careers"].status is CollectionStatus.DONE
    assert json.loads(await fake_redis.get("tcc:programs")) == [{"slug": "edited-in-admin"}]
    assert report.ok


@pytest.mark.asyncio
async def test_force_overwrites_existing_data(store, fake_redis, content_root, seeded):
    await fake_redis.set("tcc:programs", json.dumps([{"slug": "edited-in-admin"}]))

    report = await migrate_content(store, FileReader(content_root), ["programs"], force=True)

    assert _outcomes(report)["programs"].status is CollectionStatus.DONE
    stored = json.loads(await fake_redis.get("tcc:programs"))
    assert [p["slug"] for p in stored] == ["coding", "robotics"]


@pytest.mark.asyncio
async def test_empty_array_key_is_written(store, fake_redis, content_root, seeded):
    await fake_redis.set("tcc:research", "[]")

    report = await migrate_content(store, FileReader(content_root), ["research"])

    assert _outcomes(report)["research"].status is CollectionStatus.DONE
    assert json.loads(await fake_redis.get("tcc:research"))[0]["slug"] == "paper"


@pytest.mark.asyncio
async def test_unreadable_collection_fails_alone(store, fake_redis, content_root, seeded, write_doc):
    write_doc("gallery", "broken", "caption: [unclosed")

    report = await migrate_content(store, FileReader(content_root), ["gallery", "programs"])

    outcomes = _outcomes(report)
    assert outcomes["gallery"].status is CollectionStatus.FAILED
    assert outcomes["gallery"].failed_step == "reading_files"
    assert outcomes["programs"].status is CollectionStatus.DONE
    assert not report.ok
    assert report.partial
    assert await fake_redis.get("tcc:gallery") is None


@pytest.mark.asyncio
async def test_connection_failure_touches_nothing(offline_store, content_root, seeded):
    report = await migrate_content(offline_store, FileReader(content_root))

    assert report.state is MigrationState.FAILED
    assert report.failed_step == "connecting"
    assert report.outcomes == []
    payload = report.as_dict()
    assert payload["success"] is False
    assert payload["failed_step"] == "connecting"


@pytest.mark.asyncio
async def test_report_payload(store, content_root, seeded):
    report = await migrate_content(store, FileReader(content_root), ["programs"])

    payload = report.as_dict()

    assert payload["success"] is True
    assert payload["message"] == "Migration completed"
    assert payload["migrated"] == {"programs": 2}
    assert payload["collections"][0]["status"] == "done"
    assert payload["collections"][0]["key"] == "tcc:programs"
