#!/usr/bin/env python3
import json
import socket
import struct
import logging

from protocol import Protocol, PacketType, ResponseCode
from server import read_port

HOST = '127.0.0.1'
VERSION = 1

# ---------------------------------------------
#  Helper function to show available commands
# ---------------------------------------------

def print_help():
    print("""
Available commands:
  SPAWN <monster_id> <x> <y>
  DEATH <monster_id>
  SYNC
  EXIT
""")

# ---------------------------------------------
#  Build a packet from a command line
# ---------------------------------------------

def build_packet(line: str, sequence: int) -> bytes:
    """
    Turn a command line into request bytes.
    Raises ValueError on an unknown command or bad arguments.
    """
    try:
        return _build_packet(line.split(), sequence)
    except struct.error as e:
        raise ValueError(f"Argument out of range: {e}") from e


def _build_packet(parts: list, sequence: int) -> bytes:
    if not parts:
        raise ValueError("Empty command.")
    cmd = parts[0].upper()

    if cmd == 'SPAWN' and len(parts) == 4:
        monster_id, x, y = (int(p) for p in parts[1:])
        return Protocol.make_request(PacketType.SPAWN_MONSTER_REQUEST, VERSION, sequence, monster_id, x, y)
    if cmd == 'DEATH' and len(parts) == 2:
        return Protocol.make_request(PacketType.MONSTER_DEATH_NOTIFICATION, VERSION, sequence, int(parts[1]))
    if cmd == 'SYNC' and len(parts) == 1:
        return Protocol.make_request(PacketType.STATE_SYNC_NOTIFICATION, VERSION, sequence)
    raise ValueError("Unknown command or wrong arguments.")

# ---------------------------------------------
#  Render server responses for display
# ---------------------------------------------

def describe_response(code: int, body: bytes) -> str:
    if code == ResponseCode.STATE_SNAPSHOT:
        snapshot = json.loads(body.decode('utf-8'))
        lines = [
            f"STATE: gold={snapshot['userGold']} score={snapshot['score']} "
            f"baseHp={snapshot['baseHp']} monsterLevel={snapshot['monsterLevel']}",
            f"  towers: {len(snapshot['towers'])}",
            f"  monsters: {len(snapshot['monsters'])}",
        ]
        for m in snapshot['monsters']:
            pos = m['position']
            lines.append(f"  - ID: {m['id']} | HP: {m['hp']} | at ({pos['x']}, {pos['y']})")
        return "\n".join(lines)

    text = body.decode('utf-8', errors='replace')
    if code in (ResponseCode.SPAWN_COMPLETE, ResponseCode.DEATH_PROCESSED):
        return f"OK: {text}"
    if code == ResponseCode.REJECTED:
        return f"REJECTED: {text}"
    if code == ResponseCode.ERROR:
        return f"ERROR: {text}"
    return f"Unrecognized response code {code}: {text}"

# ---------------------------------------------
#  Start client
# ---------------------------------------------

def main():
    port = read_port()
    sequence = 0
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.connect((HOST, port))
        print(f"Connected to {HOST}:{port}.")
        print_help()

        while True:
            line = input('> ').strip()
            if not line:
                continue
            if line.upper() == 'EXIT':
                print("Exiting.")
                break

            sequence += 1
            try:
                packet = build_packet(line, sequence)
            except ValueError as e:
                print(e)
                print_help()
                continue

            # Send packet and receive response
            s.sendall(packet)
            try:
                ver, code, seq, body = Protocol.read_response(s)
            except ConnectionError:
                print("Server closed connection.")
                break

            print(f"Response: version={ver}, code={code}, sequence={seq}, size={len(body)}")
            if seq != sequence:
                logging.warning(f"Response sequence {seq} does not match request {sequence}")
            print(describe_response(code, body))

if __name__ == '__main__':
    main()
