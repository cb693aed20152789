"""Tests for upstream payload decoding, bundles and the API client."""
import json
from datetime import date, time

import httpx
import pytest

from timetable.config import EngineConfig
from timetable.errors import SourceUnavailableError, TimetableDataError
from timetable.models import GroupTag, Parity, Weekday
from timetable.source import TimetableClient, decode_schedule_payload, load_bundle


def item(subject: str, group: str = "Clasă întreagă") -> dict:
    return {
        "_id": subject.lower(),
        "subjectid": {"name": subject},
        "teacherids": {"name": f"Teacher of {subject}"},
        "classroomids": {"name": "101"},
        "groupids": {"name": group, "entireclass": ""},
        "cards": {"period": "1", "weeks": "", "days": ""},
    }


PAYLOAD = {
    "data": {
        "monday": {
            "1": {"both": [item("Math")], "par": [], "impar": []},
            "2": {"both": [], "par": [item("Chemistry")], "impar": [item("Physics")]},
            "3": {"both": [item("Lab A", "Grupa 1"), item("Lab B", "Grupa 2")], "par": [], "impar": []},
        },
        "tuesday": {
            "9": {"both": [item("Orphan")], "par": [], "impar": []},
        },
        "weekend_2024-10-19": {
            "1": {"both": [item("Math")], "par": [], "impar": []},
        },
    },
    "periods": [
        {"_id": "1", "starttime": "8:00", "endtime": "9:30"},
        {"_id": "2", "starttime": "9:40", "endtime": "11:10"},
        {"_id": "3", "starttime": "11:30", "endtime": "13:00"},
    ],
}


def test_decode_schedule_payload() -> None:
    periods = decode_schedule_payload(PAYLOAD)

    by_subject = {p.subject_name: p for p in periods}
    assert set(by_subject) == {"Math", "Chemistry", "Physics", "Lab A", "Lab B"}
    assert by_subject["Math"].parity is Parity.ALL
    assert by_subject["Chemistry"].parity is Parity.EVEN
    assert by_subject["Physics"].parity is Parity.ODD
    assert by_subject["Lab A"].group is GroupTag.SUBGROUP_1
    assert by_subject["Lab B"].group is GroupTag.SUBGROUP_2
    assert by_subject["Math"].start_time == time(8, 0)
    assert by_subject["Physics"].ordinal == 2
    assert by_subject["Physics"].period_id == "2"
    assert by_subject["Math"].room_number == "101"
    assert all(p.weekday is Weekday.MONDAY for p in periods)


def test_decode_prefers_per_weekday_period_times() -> None:
    period_times = {"monday": [{"period": 0, "starttime": "08:30", "endtime": "10:00"}]}

    periods = decode_schedule_payload(PAYLOAD, period_times)

    math = next(p for p in periods if p.subject_name == "Math")
    physics = next(p for p in periods if p.subject_name == "Physics")
    assert (math.start_time, math.end_time) == (time(8, 30), time(10, 0))
    assert physics.start_time == time(9, 40)


def test_load_bundle(tmp_path) -> None:
    path = tmp_path / "timetable.json"
    path.write_text(json.dumps({
        "periods": [
            {"weekday": "monday", "start_time": "09:00", "end_time": "10:00", "subject_name": "Math"},
            {"weekday": "monday", "start_time": "bad", "end_time": "10:00", "subject_name": "Broken"},
        ],
        "recovery_days": [
            {"date": "2024-10-19", "replaced_weekday": "monday"},
        ],
    }), encoding="utf-8")

    data = load_bundle(path)

    assert [p.subject_name for p in data.periods] == ["Math"]
    assert data.recovery_days[0].date == date(2024, 10, 19)


def test_load_bundle_missing_file(tmp_path) -> None:
    with pytest.raises(TimetableDataError):
        load_bundle(tmp_path / "missing.json")


def make_client(handler) -> TimetableClient:
    config = EngineConfig(api_base_url="https://api.test/v1", aux_api_base_url="https://aux.test/api")
    return TimetableClient(config, transport=httpx.MockTransport(handler))


def test_fetch_timetable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/orar":
            assert request.url.params["_id"] == "g-1"
            assert request.url.params["tip"] == "class"
            return httpx.Response(200, json=PAYLOAD)
        if request.url.path == "/api/schedule":
            return httpx.Response(200, json={})
        if request.url.path == "/api/recovery-days":
            return httpx.Response(200, json=[
                {"date": "2024-10-19", "replacedDay": "monday", "reason": "", "groupId": "",
                 "groupName": "", "isActive": True},
            ])
        return httpx.Response(404)

    data = make_client(handler).fetch_timetable("g-1")

    assert len(data.periods) == 5
    assert data.recovery_days[0].replaced_weekday is Weekday.MONDAY


def test_fetch_timetable_tolerates_missing_recovery_days() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/orar":
            return httpx.Response(200, json=PAYLOAD)
        return httpx.Response(503)

    data = make_client(handler).fetch_timetable("g-1")

    assert len(data.periods) == 5
    assert data.recovery_days == ()


def test_fetch_schedule_errors_are_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    with pytest.raises(SourceUnavailableError, match="500"):
        make_client(handler).fetch_schedule("g-1")


def test_timeout_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(SourceUnavailableError, match="timed out"):
        make_client(handler).fetch_groups()


def test_find_group_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"_id": "g-1", "name": "P-2422"}, {"_id": "g-2", "name": "P-2423"}])

    client = make_client(handler)

    assert client.find_group_id("P-2423") == "g-2"
    assert client.find_group_id("X-0000") is None
