import doorsync
import pytest

from doorsync.errors import DecodingError, InvalidRelease
from doorsync.protocol import message


def test_broadcast_parts():

    broadcast = message.Broadcast('front.state', b'\x08\x01')
    parts = tuple(broadcast)

    assert parts == (b'front.state.', message.version, b'\x08\x01')


def test_broadcast_from_parts():

    parts = (b'front.state.', message.version, b'\x08\x01')
    broadcast = message.Broadcast.from_parts(parts)

    assert broadcast.topic == 'front.state'
    assert broadcast.payload == b'\x08\x01'


def test_broadcast_bad_parts():

    with pytest.raises(DecodingError):
        message.Broadcast.from_parts((b'front.state.', message.version))

    with pytest.raises(DecodingError):
        message.Broadcast.from_parts((b'front.state.', b'z', b''))


def test_broadcast_requires_topic():

    with pytest.raises(ValueError):
        message.Broadcast('')

    with pytest.raises(ValueError):
        message.Broadcast(None)


def test_topic():

    assert message.topic('front', message.REQUEST) == 'front.request'
    assert message.topic(' front ', message.STATE) == 'front.state'
    assert message.topic('front', message.DIAGNOSTIC) == 'front.diagnostic'

    with pytest.raises(ValueError):
        message.topic('front.door', message.STATE)


def test_diagnostic():

    error = InvalidRelease('no claim', session='s1')
    request = doorsync.DoorRequest(doorsync.RequestMode.RELEASE, 's1')
    state = doorsync.DoorState.open(('s2',))

    payload = message.diagnostic(error, request, state)
    decoded = doorsync.json.loads(payload)

    assert decoded['type'] == 'InvalidRelease'
    assert decoded['text'] == 'no claim'
    assert decoded['mode'] == 'RELEASE'
    assert decoded['session'] == 's1'
    assert decoded['state'] == {'status': 'OPEN', 'sessions': ['s2']}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
