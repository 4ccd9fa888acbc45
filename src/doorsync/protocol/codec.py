""" Conversion between the door records and the opaque byte payloads carried
    by the publish/subscribe transport. This module has no side effects; the
    field-numbered wire format itself is handled by the protobuf runtime.
"""

from google.protobuf import message as protobuf

from .. import door
from ..errors import DecodingError, EncodingError
from . import schema


def encode(record):
    """ Return the wire representation of *record*, which must be a
        :class:`doorsync.DoorState` or a :class:`doorsync.DoorRequest`.
    """

    if isinstance(record, door.DoorState):
        message = schema.DoorState()
        message.status = int(record.status)
        message.sessions.extend(record.sessions)

    elif isinstance(record, door.DoorRequest):
        message = schema.DoorRequest()
        message.mode = int(record.mode)
        message.session = record.session

    else:
        raise EncodingError('cannot encode ' + type(record).__name__)

    try:
        encoded = message.SerializeToString()
    except (protobuf.EncodeError, ValueError) as e:
        raise EncodingError('failed to encode %s: %s' % (type(record).__name__, e))

    return encoded



def decode(data, kind):
    """ Interpret *data* as the wire representation of *kind*, either
        :class:`doorsync.DoorState` or :class:`doorsync.DoorRequest`, and
        return a new instance of *kind*. A
        :class:`doorsync.errors.DecodingError` is raised for anything that
        cannot be turned into a valid record.
    """

    if kind is door.DoorState:
        message = schema.DoorState()
    elif kind is door.DoorRequest:
        message = schema.DoorRequest()
    else:
        raise TypeError('cannot decode to ' + repr(kind))

    try:
        data.decode
    except AttributeError:
        if isinstance(data, memoryview):
            data = data.tobytes()
        else:
            raise DecodingError('expected bytes, not ' + type(data).__name__)

    try:
        message.ParseFromString(data)
    except (protobuf.DecodeError, ValueError) as e:
        raise DecodingError("malformed %s: %s" % (kind.__name__, e))

    # Enumerations are open in proto3; values outside the known set parse
    # cleanly and have to be rejected here.

    try:
        if kind is door.DoorState:
            record = door.DoorState(door.DoorStatus(message.status), tuple(message.sessions))
        else:
            record = door.DoorRequest(door.RequestMode(message.mode), message.session)
    except (TypeError, ValueError) as e:
        raise DecodingError("invalid %s: %s" % (kind.__name__, e))

    return record



def decode_request(data):
    return decode(data, door.DoorRequest)


def decode_state(data):
    return decode(data, door.DoorState)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
