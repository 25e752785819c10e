from __future__ import annotations

import json

import pytest

from client import build_packet, describe_response
from protocol import MonsterDeathNotification, PacketType, Protocol, ResponseCode, SpawnMonsterRequest


def test_build_spawn_packet() -> None:
    packet = Protocol.decode(build_packet("spawn 1 5 -5", 7))

    assert packet.packet_type == PacketType.SPAWN_MONSTER_REQUEST
    assert packet.sequence == 7
    assert packet.payload == SpawnMonsterRequest(1, 5, -5)


def test_build_death_and_sync_packets() -> None:
    assert Protocol.decode(build_packet("DEATH 3", 1)).payload == MonsterDeathNotification(3)
    assert Protocol.decode(build_packet("SYNC", 2)).packet_type == PacketType.STATE_SYNC_NOTIFICATION


@pytest.mark.parametrize("line", ["", "SPAWN 1 2", "DEATH x", "DEATH -1", "FLY 1"])
def test_build_packet_rejects_bad_commands(line: str) -> None:
    with pytest.raises(ValueError):
        build_packet(line, 1)


def test_describe_snapshot() -> None:
    body = json.dumps(
        {
            "userGold": 5,
            "baseHp": 0,
            "monsterLevel": 0,
            "score": 2,
            "towers": [],
            "monsters": [{"id": 1, "hp": 100, "position": {"x": 5, "y": 5}}],
        }
    ).encode()

    text = describe_response(ResponseCode.STATE_SNAPSHOT, body)

    assert "gold=5" in text
    assert "ID: 1 | HP: 100 | at (5, 5)" in text


def test_describe_text_responses() -> None:
    assert describe_response(ResponseCode.SPAWN_COMPLETE, b"monster 1 spawn complete") == "OK: monster 1 spawn complete"
    assert describe_response(ResponseCode.REJECTED, b"monster not found") == "REJECTED: monster not found"
    assert describe_response(ResponseCode.ERROR, b"ProtocolError: x").startswith("ERROR:")
