import socket
import threading

import pytest

from empcircuit.net_io import NetIO


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


def _serve(port, handler):
    result = {}

    def run():
        with NetIO(None, port, quiet=True) as server:
            result["value"] = handler(server)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread, result


@pytest.mark.parametrize("port", [-1, 65536])
def test_invalid_port_rejected(port):
    with pytest.raises(ValueError, match="Invalid port number!"):
        NetIO("127.0.0.1", port, quiet=True)


def test_round_trip_and_counter(capsys):
    port = _free_port()

    def echo_reversed(server):
        data = server.recv_data(5)
        server.send_data(data[::-1])
        server.flush()
        return data

    thread, result = _serve(port, echo_reversed)
    with NetIO("127.0.0.1", port, quiet=True) as client:
        client.send_data(b"hello")
        assert client.recv_data(5) == b"olleh"
        assert client.counter == 5
        client.print_counter()
    thread.join(timeout=10)
    assert result["value"] == b"hello"
    assert capsys.readouterr().out == "Transfer cost (bytes): 5\n"


def test_sync_and_bools_do_not_count_sync_bytes():
    port = _free_port()

    def handler(server):
        server.sync()
        return server.recv_bool(11), server.counter

    thread, result = _serve(port, handler)
    bits = [True, False, False, True, True, False, True, False, False, True, True]
    with NetIO("127.0.0.1", port, quiet=True) as client:
        client.sync()
        client.send_bool(bits)
        client.flush()
        sent = client.counter
    thread.join(timeout=10)
    received, server_counter = result["value"]
    assert received == bits
    assert server_counter == 0
    assert sent == 4


def test_peer_closing_early_raises_connection_error():
    port = _free_port()

    def handler(server):
        server.send_data(b"ab")
        server.flush()
        return server.counter

    thread, result = _serve(port, handler)
    client = NetIO("127.0.0.1", port, quiet=True)
    try:
        with pytest.raises(ConnectionError):
            client.recv_data(4)
        assert client.counter == 0
    finally:
        client.close()
    thread.join(timeout=10)
    assert result["value"] == 2


def test_delay_options():
    port = _free_port()
    thread, result = _serve(port, lambda server: server.recv_data(1))
    with NetIO("127.0.0.1", port, quiet=True) as client:
        client.set_delay()
        assert client.sock.getsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY) == 0
        client.set_nodelay()
        assert client.sock.getsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY) > 0
        client.send_data(b"z")
    thread.join(timeout=10)
    assert result["value"] == b"z"