""" The :class:`Bridge` connects a :class:`doorsync.DoorStateMachine` to the
    publish/subscribe transport: requests arrive on one topic, every new
    state is published on another, and rejections are reported on a third.
"""

import logging
import threading

from . import errors
from .protocol import codec
from .protocol import message

logger = logging.getLogger(__name__)


class Bridge:
    """ Dispatch requests for the door called *name* to *machine*. The
        *publisher* is anything with a ``publish(broadcast)`` method, such as
        a :class:`doorsync.protocol.publish.Server`; the *subscriber* is
        anything with a ``register(callback, topic)`` method, such as a
        :class:`doorsync.protocol.publish.Listener`.

        The bridge is a listener on the state machine, so every snapshot the
        machine produces is published, including the intermediate MOVING
        snapshot and any transition completed later by a travel timer.

        Only a weak reference to :func:`req_incoming` is kept by a real
        subscriber; the caller is expected to hold on to the bridge.
    """

    def __init__(self, machine, publisher, subscriber, name='door'):

        self.machine = machine
        self.name = name
        self.pub = publisher

        self.request_topic = message.topic(name, message.REQUEST)
        self.state_topic = message.topic(name, message.STATE)
        self.diagnostic_topic = message.topic(name, message.DIAGNOSTIC)

        self.accepted = 0
        self.rejected = 0
        self.dropped = 0
        self._stats_lock = threading.Lock()

        machine.register(self.publish_state)
        subscriber.register(self.req_incoming, self.request_topic)


    def publish_diagnostic(self, error, request=None):
        """ Report a rejected *request* to anyone subscribed to the
            diagnostic topic. The state reported is the one captured by the
            state machine when it rejected the request; a travel timer may
            have completed since.
        """

        state = error.state
        if state is None:
            state = self.machine.state

        payload = message.diagnostic(error, request, state)
        broadcast = message.Broadcast(self.diagnostic_topic, payload)
        self.pub.publish(broadcast)


    def publish_state(self, state):
        """ Encode and publish a :class:`doorsync.DoorState` snapshot.
        """

        payload = codec.encode(state)
        broadcast = message.Broadcast(self.state_topic, payload)
        self.pub.publish(broadcast)
        logger.debug("published %s %r", state.status.name, state.sessions)


    def req_incoming(self, broadcast):
        """ Handle a single inbound request. Nothing raised while handling
            a request escapes this method: undecodable requests are dropped,
            rejected requests are reported via :func:`publish_diagnostic`.
        """

        try:
            request = codec.decode_request(broadcast.payload)
        except errors.DecodingError as e:
            logger.warning("dropped request on %s: %s", broadcast.topic, e)
            self._count('dropped')
            return

        try:
            self.machine.handle(request)
        except (errors.Busy, errors.InvalidRelease) as e:
            logger.info("rejected %s from %r: %s", request.mode.name, request.session, e)
            self._count('rejected')
            self.publish_diagnostic(e, request)
            return

        self._count('accepted')


    def start(self):
        """ Publish the current state, giving subscribers that joined before
            any request a baseline to work from.
        """

        self.publish_state(self.machine.state)


    @property
    def stats(self):

        with self._stats_lock:
            stats = dict()
            stats['accepted'] = self.accepted
            stats['rejected'] = self.rejected
            stats['dropped'] = self.dropped

        return stats


    def _count(self, which):

        with self._stats_lock:
            setattr(self, which, getattr(self, which) + 1)


# end of class Bridge


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
