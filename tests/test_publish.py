""" These tests put real ZeroMQ sockets on the local host. Subscriptions
    take a moment to propagate, and anything published before then is
    dropped; each test therefore repeats its broadcast until it arrives.
"""

import threading
import time
import doorsync
import pytest

from doorsync import DoorState
from doorsync.errors import PortError
from doorsync.protocol import message
from doorsync.protocol import publish


def repeat_until(send, event, timeout=5, interval=0.05):

    deadline = time.time() + timeout

    while time.time() < deadline:
        send()
        if event.wait(interval):
            return True

    return False


def test_server_to_client():

    server = publish.Server()
    client = publish.Client('localhost', server.port)

    received = list()
    arrived = threading.Event()

    def collect(broadcast):
        received.append(broadcast)
        arrived.set()

    client.register(collect, 'front.state')

    send = lambda: server.publish(message.Broadcast('front.state', b'\x08\x01'))

    try:
        assert repeat_until(send, arrived)
    finally:
        client.close()
        server.close()

    assert received[0].topic == 'front.state'
    assert received[0].payload == b'\x08\x01'


def test_sender_to_listener():

    listener = publish.Listener()
    sender = publish.Sender('localhost', listener.port)

    received = list()
    arrived = threading.Event()

    def collect(broadcast):
        received.append(broadcast)
        arrived.set()

    listener.register(collect, 'front.request')

    # Something on a topic that merely starts with the same characters
    # must not be delivered.

    def send():
        sender.publish(message.Broadcast('front.requests', b'ignored'))
        sender.publish(message.Broadcast('front.request', b'\x12\x02s1'))

    try:
        assert repeat_until(send, arrived)
    finally:
        sender.close()
        listener.close()

    for broadcast in received:
        assert broadcast.topic == 'front.request'
        assert broadcast.payload == b'\x12\x02s1'


def test_port_in_use():

    server = publish.Server()

    try:
        with pytest.raises(PortError):
            publish.Listener(port=server.port)
    finally:
        server.close()


def test_avoid():

    first = publish.Server()
    second = publish.Server(avoid=(first.port, first.port + 1))

    assert second.port != first.port
    assert second.port != first.port + 1

    first.close()
    second.close()


def test_daemon_and_door(home):

    daemon = doorsync.Daemon('front')
    daemon.bridge.start()

    assert doorsync.config.load_ports('front') == (daemon.rep.port, daemon.pub.port)

    door = doorsync.Door('front')
    opened = threading.Event()

    def send():
        door.open('s1')
        if door.wait(lambda state: state is not None and 's1' in state.sessions, 0):
            opened.set()

    try:
        assert repeat_until(send, opened, interval=0.1)
        assert door.state == DoorState.open(('s1',))

        # The request path is established now; no need to repeat.

        door.release('s1')
        state = door.wait(lambda state: state == DoorState.closed(), 5)
        assert state == DoorState.closed()

        door.release('s1')
        deadline = time.time() + 5
        while time.time() < deadline and not door.rejections('s1'):
            time.sleep(0.01)

        rejection = door.rejections('s1')[-1]
        assert rejection['type'] == 'InvalidRelease'

    finally:
        door.close()
        daemon.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
