""" A class representation of a doorsync publish/subscribe message, and the
    helpers to build the payloads it carries.
"""

import time as timemodule

from .. import json
from ..errors import DecodingError


# This is the version of the doorsync on-the-wire framing implemented here,
# identified by a single byte.

version = b'1'

# Suffixes appended to the door name to form the topics for a single door.

REQUEST = 'request'
STATE = 'state'
DIAGNOSTIC = 'diagnostic'


class Broadcast:
    """ The :class:`Broadcast` is the unit of exchange on a PUB/SUB socket:
        a *topic* and an opaque *payload*, which is the wire encoding of a
        door record, or the JSON encoding of a diagnostic.

        On the wire a :class:`Broadcast` is a three-part multipart message:
        the topic with a trailing dot, the protocol version, and the payload.
        The trailing dot prevents leading substring matches in the PUB/SUB
        subscription filter from picking up extra topics; ``front.state``
        would otherwise also match ``front.stateful``.

        :ivar timestamp: A UNIX epoch timestamp for the message creation time.
    """

    def __init__(self, topic, payload=b''):

        if topic is None or topic == '':
            raise ValueError('a broadcast requires a topic')

        self.topic = str(topic)
        self.payload = payload
        self.timestamp = timemodule.time()
        self.parts = None


    def __iter__(self):
        self._finalize()
        return iter(self.parts)


    def __repr__(self):
        return "Broadcast(%r, %d bytes)" % (self.topic, len(self.payload))


    def _finalize(self):
        """ Prepare the tuple that will be used for the multipart
            transmission on the wire.
        """

        if self.parts is None:
            topic = (self.topic + '.').encode()
            self.parts = (topic, version, bytes(self.payload))


    @classmethod
    def from_parts(cls, parts):
        """ Reconstruct a :class:`Broadcast` from the multipart *parts*
            received on a SUB socket.
        """

        if len(parts) != 3:
            raise DecodingError("expected 3 message parts, received %d" % (len(parts)))

        topic, their_version, payload = parts

        if their_version != version:
            raise DecodingError("message is doorsync protocol %r, recipient expects %r" % (their_version, version))

        topic = bytes(topic).decode()
        if topic.endswith('.'):
            topic = topic[:-1]

        return cls(topic, bytes(payload))


# end of class Broadcast



def topic(name, suffix):
    """ Return the full topic for the door called *name*; the *suffix* is one
        of :data:`REQUEST`, :data:`STATE`, or :data:`DIAGNOSTIC`.
    """

    name = str(name).strip()

    if name == '' or '.' in name:
        raise ValueError('invalid door name: ' + repr(name))

    return name + '.' + suffix



def diagnostic(error, request=None, state=None):
    """ Encapsulate a rejection as a JSON payload. The *error* is a
        :class:`doorsync.errors.DoorError`; the offending *request* and the
        unchanged *state*, if provided, are included for context.
    """

    payload = error.to_dict()

    if request is not None:
        payload['mode'] = request.mode.name
        payload['session'] = request.session

    if state is not None:
        payload['state'] = state.to_dict()

    return json.dumps(payload)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
