import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from errors import ProtocolError

SERVER_VERSION = 1


class PacketType(IntEnum):
    SPAWN_MONSTER_REQUEST = 700
    MONSTER_DEATH_NOTIFICATION = 701
    STATE_SYNC_NOTIFICATION = 702


class ResponseCode(IntEnum):
    SPAWN_COMPLETE = 2200
    DEATH_PROCESSED = 2201
    STATE_SNAPSHOT = 2202
    REJECTED = 4200
    ERROR = 9000


@dataclass(frozen=True)
class SpawnMonsterRequest:
    monster_id: int
    x: int
    y: int


@dataclass(frozen=True)
class MonsterDeathNotification:
    monster_id: int


@dataclass(frozen=True)
class StateSyncNotification:
    pass


Payload = Union[SpawnMonsterRequest, MonsterDeathNotification, StateSyncNotification, bytes]


@dataclass(frozen=True)
class Packet:
    packet_type: int
    version: int
    sequence: int
    payload: Payload


class Protocol:
    HEADER_FMT = '<H B I I'  # little-endian: H=packet_type, B=version, I=sequence, I=payload_size
    HEADER_SIZE = struct.calcsize(HEADER_FMT)
    RESPONSE_FMT = '<B H I I'  # B=version, H=code, I=sequence, I=payload_size
    RESPONSE_SIZE = struct.calcsize(RESPONSE_FMT)
    MAX_PAYLOAD_SIZE = 64 * 1024
    RECV_CHUNK = 4096

    # packet type -> (payload format, payload class)
    PAYLOADS = {
        PacketType.SPAWN_MONSTER_REQUEST: ('<I i i', SpawnMonsterRequest),
        PacketType.MONSTER_DEATH_NOTIFICATION: ('<I', MonsterDeathNotification),
        PacketType.STATE_SYNC_NOTIFICATION: ('<', StateSyncNotification),
    }

    @staticmethod
    def recv_exact(conn, n: int) -> bytes:
        buf = b''
        while len(buf) < n:
            chunk = conn.recv(n - len(buf))
            if not chunk:
                raise ConnectionError("Connection closed")
            buf += chunk
        return buf

    @classmethod
    def discard_exact(cls, conn, n: int) -> None:
        while n > 0:
            chunk = conn.recv(min(n, cls.RECV_CHUNK))
            if not chunk:
                raise ConnectionError("Connection closed")
            n -= len(chunk)

    @classmethod
    def read_packet(cls, conn) -> bytes:
        """
        Read one framed request (header + payload) from the stream, undecoded.
        An oversized payload is drained from the stream and raises ProtocolError,
        so the next read starts on a header again.
        """
        header = cls.recv_exact(conn, cls.HEADER_SIZE)
        _, _, sequence, size = struct.unpack(cls.HEADER_FMT, header)
        if size > cls.MAX_PAYLOAD_SIZE:
            cls.discard_exact(conn, size)
            raise ProtocolError(
                f"Payload of {size} bytes exceeds the {cls.MAX_PAYLOAD_SIZE} byte limit (seq {sequence})"
            )
        payload = cls.recv_exact(conn, size) if size else b''
        return header + payload

    @classmethod
    def decode(cls, raw: bytes) -> Packet:
        """
        Turn a raw request buffer into a Packet.
        Known packet types get a typed payload; unknown ones keep the raw bytes.
        """
        if len(raw) < cls.HEADER_SIZE:
            raise ProtocolError(f"Packet too short: {len(raw)} bytes, header needs {cls.HEADER_SIZE}")
        packet_type, version, sequence, size = struct.unpack(cls.HEADER_FMT, raw[:cls.HEADER_SIZE])
        body = raw[cls.HEADER_SIZE:]
        if len(body) != size:
            raise ProtocolError(f"Payload size mismatch: header says {size}, got {len(body)}")

        if packet_type not in cls.PAYLOADS:
            return Packet(packet_type, version, sequence, body)

        fmt, payload_cls = cls.PAYLOADS[PacketType(packet_type)]
        try:
            fields = struct.unpack(fmt, body)
        except struct.error as e:
            raise ProtocolError(f"Malformed payload for packet type {packet_type}: {e}") from e
        return Packet(PacketType(packet_type), version, sequence, payload_cls(*fields))

    @classmethod
    def make_request(cls, packet_type: int, version: int, sequence: int, *fields) -> bytes:
        """
        Build a request. Known packet types pack their payload fields;
        any other type takes raw bytes chunks as its payload, which the
        client never sends but is how an unknown packet is put on the wire.
        """
        if packet_type in cls.PAYLOADS:
            payload = struct.pack(cls.PAYLOADS[PacketType(packet_type)][0], *fields)
        else:
            payload = b''.join(fields)
        header = struct.pack(cls.HEADER_FMT, packet_type, version, sequence, len(payload))
        return header + payload

    @classmethod
    def make_response(cls, version: int, code: int, sequence: int = 0, payload: bytes = b'') -> bytes:
        header = struct.pack(cls.RESPONSE_FMT, version, code, sequence, len(payload))
        return header + payload

    @classmethod
    def parse_response(cls, raw: bytes) -> tuple[int, int, int, bytes]:
        if len(raw) < cls.RESPONSE_SIZE:
            raise ProtocolError(f"Response too short: {len(raw)} bytes")
        version, code, sequence, size = struct.unpack(cls.RESPONSE_FMT, raw[:cls.RESPONSE_SIZE])
        body = raw[cls.RESPONSE_SIZE:cls.RESPONSE_SIZE + size]
        if len(body) != size:
            raise ProtocolError(f"Response body truncated: expected {size}, got {len(body)}")
        return version, code, sequence, body

    @classmethod
    def read_response(cls, conn) -> tuple[int, int, int, bytes]:
        header = cls.recv_exact(conn, cls.RESPONSE_SIZE)
        size = struct.unpack(cls.RESPONSE_FMT, header)[3]
        body = cls.recv_exact(conn, size) if size else b''
        return cls.parse_response(header + body)
