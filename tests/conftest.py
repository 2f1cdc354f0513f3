import logging
import socket
import threading

import pytest


class FakeSocket:
    """Socket stand-in for a connection that already succeeded."""

    def __init__(self, response=b"", send_error=None, recv_error=None):
        self.response = response
        self.send_error = send_error
        self.recv_error = recv_error
        self.sent = []
        self.recv_calls = 0
        self.closed = False

    def sendall(self, data):
        if self.send_error:
            raise self.send_error
        self.sent.append(data)

    def recv(self, n):
        self.recv_calls += 1
        if self.recv_error:
            raise self.recv_error
        return self.response[:n]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_socket():
    return FakeSocket


def _serve_once(listener: socket.socket, response: bytes) -> None:
    try:
        conn, _ = listener.accept()
    except OSError:
        return
    with conn:
        conn.settimeout(2.0)
        try:
            conn.sendall(response)
            # drain until the client closes so we never reset unread data
            while conn.recv(4096):
                pass
        except OSError:
            pass


@pytest.fixture
def banner_server():
    """
    Factory: start a loopback listener that sends `response` to one client.
    Returns the listening port.
    """
    listeners = []

    def start(response: bytes = b"") -> int:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        listeners.append(listener)
        threading.Thread(target=_serve_once, args=(listener, response), daemon=True).start()
        return listener.getsockname()[1]

    yield start

    for listener in listeners:
        listener.close()


@pytest.fixture
def closed_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture(autouse=True)
def reset_port_scanner_logger():
    yield
    logger = logging.getLogger("port_scanner")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def stalled_port():
    """
    A loopback port whose handshakes never complete: the listener never
    accepts and its backlog is already full, so new SYNs are dropped.
    """
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(0)
    addr = listener.getsockname()

    fillers = []
    for _ in range(8):
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.setblocking(False)
        s.connect_ex(addr)
        fillers.append(s)

    yield addr[1]

    for s in fillers:
        s.close()
    listener.close()
