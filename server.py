#!/usr/bin/env python3
import socket
import threading
import os
import logging

from content import ContentStore
from dispatcher import PacketDispatcher
from errors import ProtocolError
from protocol import Protocol
from state import GameState

HOST = '0.0.0.0'
DEFAULT_PORT = 1357
CONFIG_FILE = 'myport.info'


def read_port(config_file: str = CONFIG_FILE) -> int:
    """Read the listening port from the configuration file, falling back to the default."""
    if not os.path.exists(config_file):
        logging.warning(f"{config_file} not found, using default port {DEFAULT_PORT}")
        return DEFAULT_PORT
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            return int(f.read().strip())
    except ValueError:
        logging.warning(f"Invalid port value in {config_file}, using default {DEFAULT_PORT}")
        return DEFAULT_PORT


def handle_client(conn, addr, dispatcher: PacketDispatcher):
    logging.info(f"Connection from {addr}")
    try:
        while True:
            frame_error = None
            try:
                raw = Protocol.read_packet(conn)
            except ConnectionError:
                break
            except ProtocolError as e:
                # oversized frame, already drained from the stream
                raw, frame_error = b'', e
            try:
                if frame_error is not None:
                    dispatcher.reject(conn, frame_error)
                else:
                    dispatcher.dispatch(conn, raw)
            except OSError as e:
                logging.error(f"Failed to send response to {addr}: {e}")
                break

    except Exception as e:
        logging.error(f"Outer exception: {e}")
    finally:
        logging.info(f"Connection closed from {addr}")
        conn.close()


def main():
    logging.basicConfig(level=logging.INFO)
    port = read_port()

    # Content is loaded once; one game state is shared by every connection
    content = ContentStore.load()
    dispatcher = PacketDispatcher(GameState(), content)

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
        server_socket.bind((HOST, port))
        server_socket.listen()
        logging.info(f"Server listening on {HOST}:{port}")

        while True:
            conn, addr = server_socket.accept()
            threading.Thread(
                target=handle_client,
                args=(conn, addr, dispatcher),
                daemon=True
            ).start()


if __name__ == '__main__':
    main()
