import asyncio
import copy
from datetime import datetime, timezone
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from jobdesk.core.schema import Job, User
from jobdesk.infrastructure import InMemoryKeyValueStore, InMemoryRemoteStore, JsonFileStore
from jobdesk.workers.sync import SyncEngine

ROSTER = (
    User(email="boss@x", name="Boss", role="Admin", password="000000"),
    User(email="a@x", name="Ana", role="User", password="000000"),
)

FIXED_NOW = datetime(2024, 3, 20, 8, 0, tzinfo=timezone.utc)


def _job(job_id: str, **overrides) -> Job:
    data = {
        "id": job_id,
        "category": "Problem",
        "subCategory": "SLA",
        "dateInput": "2024-03-01",
        "branchDept": "Medan",
        "jobType": "Cek SLA",
        "status": "Pending",
        "deadline": "2024-03-25",
    }
    data.update(overrides)
    return Job.model_validate(data)


class DelayedPutStore:
    """Remote store whose writes block until released."""

    def __init__(self, state: dict | None = None) -> None:
        self.state = copy.deepcopy(state)
        self.release = asyncio.Event()
        self.gets = 0

    async def get(self) -> dict | None:
        self.gets += 1
        return copy.deepcopy(self.state)

    async def put(self, state: dict) -> bool:
        await self.release.wait()
        self.state = copy.deepcopy(state)
        return True


class CountingStore(InMemoryRemoteStore):
    def __init__(self, state: dict | None = None) -> None:
        super().__init__(state)
        self.gets = 0

    async def get(self) -> dict | None:
        self.gets += 1
        return await super().get()


def test_pull_replaces_jobs_and_merges_users():
    remote = InMemoryRemoteStore(
        {
            "jobs": [_job("r1").to_wire()],
            "users": [{"email": "a@x", "password": "secret"}, {"email": "ghost@x", "password": "x"}],
        }
    )
    engine = SyncEngine(remote, ROSTER, clock=lambda: FIXED_NOW)

    applied = asyncio.run(engine.pull())

    assert applied is True
    assert [job.id for job in engine.jobs] == ["r1"]
    assert [(user.email, user.password) for user in engine.users] == [("boss@x", "000000"), ("a@x", "secret")]
    assert engine.status.online is True
    assert engine.status.last_synced_at == FIXED_NOW


def test_pull_ignores_malformed_sections():
    remote = InMemoryRemoteStore({"jobs": "garbage", "users": [{"email": "a@x", "password": "secret"}]})
    engine = SyncEngine(remote, ROSTER)

    async def scenario() -> None:
        await engine.add_job(_job("local"))
        remote._state = {"jobs": [{"id": "broken"}], "users": [{"email": "a@x", "password": "secret"}]}
        assert await engine.pull() is True

    asyncio.run(scenario())

    assert [job.id for job in engine.jobs] == ["local"]
    assert engine.users[1].password == "secret"


def test_null_payload_counts_as_successful_fetch():
    engine = SyncEngine(InMemoryRemoteStore(), ROSTER, clock=lambda: FIXED_NOW)

    assert asyncio.run(engine.pull()) is False
    assert engine.status.online is True
    assert engine.status.last_synced_at == FIXED_NOW


def test_pull_failure_flags_offline_and_keeps_local_state():
    remote = InMemoryRemoteStore()
    engine = SyncEngine(remote, ROSTER)

    async def scenario() -> None:
        await engine.add_job(_job("local"))
        remote.available = False
        assert await engine.pull() is False

    asyncio.run(scenario())

    assert engine.status.online is False
    assert engine.status.last_error
    assert [job.id for job in engine.jobs] == ["local"]


def test_push_failure_keeps_optimistic_mutation():
    remote = InMemoryRemoteStore()
    remote.available = False
    engine = SyncEngine(remote, ROSTER)

    async def scenario() -> None:
        assert await engine.add_job(_job("j1")) is False
        assert [job.id for job in engine.jobs] == ["j1"]
        assert engine.status.online is False
        assert not engine.in_flight

        remote.available = True
        assert await engine.update_job("j1", _job("j1", status="Completed")) is True

    asyncio.run(scenario())

    assert engine.status.online is True
    assert remote._state["jobs"][0]["status"] == "Completed"


def test_pull_is_skipped_while_push_in_flight():
    async def scenario() -> None:
        remote = DelayedPutStore({"jobs": [_job("stale").to_wire()], "users": []})
        engine = SyncEngine(remote, ROSTER)

        push = asyncio.create_task(engine.add_job(_job("fresh")))
        await asyncio.sleep(0)
        assert engine.in_flight

        assert await engine.pull() is False
        assert remote.gets == 0
        assert [job.id for job in engine.jobs] == ["fresh"]

        remote.release.set()
        assert await push is True
        assert not engine.in_flight

        assert await engine.pull() is True
        assert remote.gets == 1
        assert [job.id for job in engine.jobs] == ["fresh"]

    asyncio.run(scenario())


def test_mutations_push_whole_snapshot():
    remote = InMemoryRemoteStore()
    engine = SyncEngine(remote, ROSTER)

    async def scenario() -> None:
        await engine.add_job(_job("j1"))
        await engine.bulk_add([_job("i1"), _job("i2")])
        await engine.delete_job("j1")
        await engine.set_password("a@x", "changed")

    asyncio.run(scenario())

    assert remote.puts == 4
    assert [job["id"] for job in remote._state["jobs"]] == ["i1", "i2"]
    assert remote._state["users"] == [
        {"email": "boss@x", "password": "000000"},
        {"email": "a@x", "password": "changed"},
    ]


def test_last_full_snapshot_wins_between_clients():
    remote = InMemoryRemoteStore()
    first = SyncEngine(remote, ROSTER)
    second = SyncEngine(remote, ROSTER)

    async def scenario() -> None:
        await first.add_job(_job("from-first"))
        await second.add_job(_job("from-second"))
        await first.pull()

    asyncio.run(scenario())

    assert [job.id for job in first.jobs] == ["from-second"]


def test_local_state_round_trip():
    local = InMemoryKeyValueStore()
    engine = SyncEngine(InMemoryRemoteStore(), ROSTER, local_store=local)

    async def scenario() -> None:
        await engine.add_job(_job("j1", notes="keep"))
        await engine.set_password("a@x", "mine")

    asyncio.run(scenario())

    restored = SyncEngine(InMemoryRemoteStore(), ROSTER, local_store=local)
    restored.load_local()

    assert [(job.id, job.notes) for job in restored.jobs] == [("j1", "keep")]
    assert restored.users[1].password == "mine"


def test_corrupt_local_state_falls_back_to_defaults():
    local = InMemoryKeyValueStore()
    local.write_raw("jobs", "{not json")
    local.write("users", {"email": "a@x"})
    engine = SyncEngine(InMemoryRemoteStore(), ROSTER, local_store=local)

    engine.load_local()

    assert engine.jobs == []
    assert [user.password for user in engine.users] == ["000000", "000000"]


def test_subscribers_see_every_change():
    engine = SyncEngine(InMemoryRemoteStore(), ROSTER)
    seen: list[int] = []
    engine.subscribe(lambda snapshot: seen.append(len(snapshot.jobs)))

    async def scenario() -> None:
        await engine.add_job(_job("j1"))
        await engine.delete_job("j1")

    asyncio.run(scenario())

    assert seen == [1, 0]


def test_polling_starts_immediately_and_stops():
    async def scenario() -> None:
        remote = CountingStore({"jobs": [], "users": []})
        engine = SyncEngine(remote, ROSTER, interval=0.01)

        engine.start()
        assert engine.polling
        await asyncio.sleep(0.05)
        await engine.stop()
        assert not engine.polling

        pulls = remote.gets
        assert pulls >= 2
        await asyncio.sleep(0.03)
        assert remote.gets == pulls

    asyncio.run(scenario())


def test_unwritable_local_store_does_not_block_push(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    remote = InMemoryRemoteStore()
    engine = SyncEngine(remote, ROSTER, local_store=JsonFileStore(blocker / "data"))

    synced = asyncio.run(engine.add_job(_job("j1")))

    assert synced is True
    assert [job.id for job in engine.jobs] == ["j1"]
    assert [job["id"] for job in remote._state["jobs"]] == ["j1"]
