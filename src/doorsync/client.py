""" Requester-side interface to a door daemon: send OPEN and RELEASE
    requests, and follow the published state. The ``doorctl`` command is
    a thin wrapper around :class:`Door`.
"""

import argparse
import logging
import sys
import threading
import time

from . import config
from . import errors
from . import json
from .door import DoorRequest, DoorState, DoorStatus, RequestMode
from .protocol import codec
from .protocol import message
from .protocol import publish

logger = logging.getLogger(__name__)


class Door:
    """ A connection to the daemon for the door called *name*. The daemon's
        *address* and ports default to the configured values; ports that are
        not configured are taken from the port cache the daemon writes when
        it starts, which only works on the same host.

        State broadcasts are cached locally as they arrive; :func:`wait`
        blocks until the cached state satisfies a condition. Diagnostics for
        rejected requests are cached the same way, see :func:`rejections`.
    """

    def __init__(self, name, address=None, request_port=None, state_port=None):

        configuration = config.get(name)
        self.name = configuration.name

        if address is None:
            address = configuration['address']
        if request_port is None:
            request_port = configuration['request_port']
        if state_port is None:
            state_port = configuration['state_port']

        if request_port is None or state_port is None:
            cached_request, cached_state = config.load_ports(self.name)
            if request_port is None:
                request_port = cached_request
            if state_port is None:
                state_port = cached_state

        if request_port is None or state_port is None:
            raise RuntimeError("no known ports for door %s; is the daemon running?" % (self.name))

        self.request_topic = message.topic(self.name, message.REQUEST)
        self.state_topic = message.topic(self.name, message.STATE)
        self.diagnostic_topic = message.topic(self.name, message.DIAGNOSTIC)

        self.state = None
        self.diagnostics = list()
        self.changed = threading.Condition()

        self.sender = publish.Sender(address, request_port)
        self.subscriber = publish.Client(address, state_port)
        self.subscriber.register(self._state_incoming, self.state_topic)
        self.subscriber.register(self._diagnostic_incoming, self.diagnostic_topic)


    def close(self):
        self.sender.close()
        self.subscriber.close()


    def open(self, session):
        """ Ask the daemon to open the door on behalf of *session*, or to add
            *session* as another holder if it is already open. This returns
            as soon as the request is sent.
        """

        self.send(DoorRequest(RequestMode.OPEN, session))


    def rejections(self, session=None):
        """ Return the diagnostics received so far, optionally only those
            for requests from *session*.
        """

        with self.changed:
            diagnostics = list(self.diagnostics)

        if session is None:
            return diagnostics

        return [diagnostic for diagnostic in diagnostics if diagnostic.get('session') == session]


    def release(self, session):
        """ Ask the daemon to drop the claim held by *session*.
        """

        self.send(DoorRequest(RequestMode.RELEASE, session))


    def send(self, request):

        payload = codec.encode(request)
        self.sender.publish(message.Broadcast(self.request_topic, payload))


    def wait(self, condition, timeout=None):
        """ Block until *condition*, called with the most recent
            :class:`doorsync.DoorState` (or None if no state has arrived),
            returns True. Returns the state that satisfied the condition, or
            None if the *timeout* in seconds expired first.
        """

        with self.changed:
            satisfied = self.changed.wait_for(lambda: condition(self.state), timeout)

            if satisfied:
                return self.state

        return None


    def _diagnostic_incoming(self, broadcast):

        try:
            diagnostic = json.loads(broadcast.payload)
        except json.DecodeError:
            logger.warning("undecodable diagnostic on %s", broadcast.topic)
            return

        with self.changed:
            self.diagnostics.append(diagnostic)
            self.changed.notify_all()


    def _state_incoming(self, broadcast):

        try:
            state = codec.decode_state(broadcast.payload)
        except errors.DecodingError as e:
            logger.warning("dropped state on %s: %s", broadcast.topic, e)
            return

        with self.changed:
            self.state = state
            self.changed.notify_all()


# end of class Door



def main(arguments=None):

    parser = argparse.ArgumentParser(description='Request that a door open, or release a claim on it.')
    parser.add_argument('name', help='name of the door')
    parser.add_argument('mode', choices=('open', 'release'), help='request to send')
    parser.add_argument('session', help='session identifier making the request')
    parser.add_argument('--address', default=None, help='host running the door daemon')
    parser.add_argument('--timeout', type=float, default=5,
                        help='seconds to wait for the door to respond')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable debug logging')

    parsed = parser.parse_args(arguments)

    if parsed.verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    door = Door(parsed.name, parsed.address)
    session = parsed.session

    if parsed.mode == 'open':
        satisfied = lambda state: state is not None and session in state.sessions
        send = door.open
    else:
        satisfied = lambda state: state is not None and session not in state.sessions
        send = door.release

    # A freshly connected PUB socket drops anything sent before the
    # connection completes, so the request is repeated until the daemon
    # answers with either a state or a rejection. The same applies to the
    # first states published back; once more than one request has been
    # sent, a rejection may answer a repeat while an earlier copy was
    # accepted.

    deadline = time.time() + parsed.timeout
    answered = lambda state: state is not None
    sent = 0

    while time.time() < deadline:
        send(session)
        sent += 1

        if door.wait(answered, 0.25) is not None:
            break

        if door.rejections(session):
            break

    def finished(state):

        if satisfied(state):
            return True

        rejections = door.rejections(session)

        if len(rejections) == 0:
            return False

        if sent == 1:
            return True

        snapshot = _snapshot(rejections[-1])

        if _settled(snapshot):
            return True

        # Rejected while the door was moving; the movement may have been
        # started by an earlier copy of this request.
        return _settled(state)

    remaining = max(deadline - time.time(), 0)
    door.wait(finished, remaining)
    door.close()

    state = door.state
    rejections = door.rejections(session)

    if satisfied(state) == False and rejections and sent > 1:
        snapshot = _snapshot(rejections[-1])
        if _settled(snapshot) and satisfied(snapshot):
            state = snapshot

    if satisfied(state):
        print("%s %s" % (state.status.name, ' '.join(state.sessions)))
        return 0

    if rejections:
        rejection = rejections[-1]
        print("%s: %s" % (rejection['type'], rejection['text']))
        return 1

    print('no response from door ' + door.name)
    return 2



def _settled(state):
    return state is not None and state.status != DoorStatus.MOVING



def _snapshot(diagnostic):
    """ Return the state reported with a rejection *diagnostic* as a
        :class:`doorsync.DoorState`, or None if there is not one.
    """

    try:
        state = diagnostic['state']
        status = DoorStatus[state['status']]
        sessions = tuple(state['sessions'])
    except (KeyError, TypeError):
        return None

    try:
        return DoorState(status, sessions)
    except (TypeError, ValueError):
        return None


if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
