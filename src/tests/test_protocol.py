import json

import pytest

from music_remote.core.models import RepeatMode
from music_remote.utils.exceptions import ProtocolError
from music_remote.utils.protocol import (
    Command, Envelope, build_payload, create_command, create_get_voice_command,
    decode_snapshot, decode_voice_reply, endpoint_url, next_repeat_mode
)
from fakes import statistics_payload


def test_command_envelope_carries_user_id():
    envelope = create_command(Command.VOLUME, "42", {"volume": 70})
    assert json.loads(envelope.to_json()) == {
        "event": "volume",
        "payload": {"userID": "42", "volume": 70},
    }


def test_caller_fields_override_user_id():
    assert build_payload("42", {"userID": "override"}) == {"userID": "override"}
    assert build_payload("42") == {"userID": "42"}


def test_get_voice_payload_is_raw_user_id():
    envelope = create_get_voice_command("42")
    assert json.loads(envelope.to_json()) == {"event": "GetVoice", "payload": "42"}


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"payload": {}}', '{"event": 5}'])
def test_malformed_frames_raise_protocol_error(raw):
    with pytest.raises(ProtocolError):
        Envelope.from_json(raw)


def test_unknown_event_still_decodes():
    envelope = Envelope.from_json('{"event": "somethingNew", "payload": {"x": 1}}')
    assert envelope.event == "somethingNew"
    assert envelope.payload == {"x": 1}


def test_decode_snapshot_reference_scenario():
    state = decode_snapshot(statistics_payload())
    assert state.current_track.title == "A"
    assert state.is_playing is True
    assert state.volume == 40
    assert state.progress.current_ms == 12000
    assert state.progress.total_ms == 200000
    assert state.repeat_mode is RepeatMode.OFF
    assert state.shuffle is False
    assert state.playlist == ()


@pytest.mark.parametrize("timestamp", [
    None,
    {},
    {"current": None, "total": 1000},
    {"current": {}, "total": 1000},
    {"current": {"current": None}, "total": 1000},
    {"current": {"current": {}}, "total": 1000},
    {"current": 5, "total": 1000},
])
def test_missing_position_segments_default_to_zero(timestamp):
    payload = {"track": None, "paused": True, "volume": 10, "timestamp": timestamp}
    state = decode_snapshot(payload)
    assert state.progress.current_ms == 0
    assert state.progress.total_ms == (1000 if timestamp and "total" in timestamp else 0)


def test_snapshot_position_is_clamped_to_total():
    state = decode_snapshot(statistics_payload(current=9000, total=5000))
    assert state.progress.current_ms == 5000


def test_snapshot_defaults():
    state = decode_snapshot({})
    assert state.current_track is None
    assert state.playlist == ()
    # "paused" absent reads as not paused
    assert state.is_playing is True
    assert state.volume == 50
    assert state.repeat_mode is RepeatMode.OFF


def test_snapshot_queue_keeps_remote_order():
    queue = [{"title": "B", "url": "u2", "duration": "3:00"},
             {"title": "C", "url": "u3", "thumbnail": "t", "duration": 180000,
              "lyrics": {"plainLyrics": "la la"}}]
    state = decode_snapshot(statistics_payload(queue=queue))
    assert [t.title for t in state.playlist] == ["B", "C"]
    assert state.playlist[0].duration == "3:00"
    assert state.playlist[1].lyrics.plain_lyrics == "la la"


def test_unknown_repeat_mode_reads_as_off():
    assert decode_snapshot(statistics_payload(repeat_mode=7)).repeat_mode is RepeatMode.OFF


def test_snapshot_rejects_non_object():
    with pytest.raises(ProtocolError):
        decode_snapshot(["not", "an", "object"])


def test_decode_snapshot_is_pure():
    payload = statistics_payload(queue=[{"title": "B"}])
    assert decode_snapshot(payload) == decode_snapshot(payload)


def test_next_repeat_mode_cycles():
    assert next_repeat_mode(0) is RepeatMode.TRACK
    assert next_repeat_mode(RepeatMode.TRACK) is RepeatMode.QUEUE
    assert next_repeat_mode(2) is RepeatMode.OFF


def test_voice_reply():
    context = decode_voice_reply({"channel": {"id": "1", "name": "Lounge"},
                                  "guild": {"id": "9", "name": "Cafe"}})
    assert context.channel_name == "Lounge"
    assert context.guild_name == "Cafe"
    assert decode_voice_reply({}).channel is None


@pytest.mark.parametrize("origin,expected", [
    ("https://music.example.com", "wss://music.example.com/api/ws"),
    ("http://localhost:3000", "ws://localhost:3000/api/ws"),
    ("https://music.example.com/dashboard?tab=1", "wss://music.example.com/api/ws"),
])
def test_endpoint_mirrors_origin_security(origin, expected):
    assert endpoint_url(origin) == expected


def test_snapshot_non_list_queue_reads_as_empty():
    payload = statistics_payload()
    payload["queue"] = 5
    assert decode_snapshot(payload).playlist == ()
