""" The door daemon: the long-running process that owns the authoritative
    state for a single door. Run it with the ``doord`` command, or embed a
    :class:`Daemon` instance in a larger application.
"""

import argparse
import logging
import signal
import sys
import threading

from . import bridge
from . import config
from . import machine
from .errors import PortError
from .protocol import publish

logger = logging.getLogger(__name__)


class Daemon:
    """ The :class:`Daemon` is a facilitator for the steps taken to put a
        door on the air: loading the configuration, binding the request and
        state sockets, creating the :class:`doorsync.DoorStateMachine`, and
        connecting the two with a :class:`doorsync.Bridge`.

        The *name* is the name of the door; it selects the configuration
        file and forms the prefix of every topic. The *travel*,
        *request_port*, and *state_port* arguments override the configured
        values when they are not None.

        Port numbers are cached on disk once bound, and reused on the next
        start; if a cached port is no longer available a new one is
        assigned automatically.
    """

    def __init__(self, name, travel=None, request_port=None, state_port=None):

        self.config = config.get(name).copy()
        self.config.override(travel=travel, request_port=request_port, state_port=state_port)
        self.name = self.config.name

        cached_request, cached_state = config.load_ports(self.name)

        self.pub = _bind(publish.Server, self.config['state_port'], cached_state, avoid=())
        self.rep = None

        try:
            self.rep = _bind(publish.Listener, self.config['request_port'], cached_request, avoid=(self.pub.port,))
            self.machine = machine.DoorStateMachine(self.config['travel'])
            self.bridge = bridge.Bridge(self.machine, self.pub, self.rep, self.name)
        except Exception:
            if self.rep is not None:
                self.rep.close()
            self.pub.close()
            raise

        config.save_ports(self.name, self.rep.port, self.pub.port)

        self.shutdown = threading.Event()

        logger.info("door %s: requests on port %d, states on port %d, travel %.3fs",
                    self.name, self.rep.port, self.pub.port, self.machine.travel)


    def run(self):
        """ Publish the initial state and block until :func:`stop` is
            called, typically from a signal handler.
        """

        self.bridge.start()

        while self.shutdown.is_set() == False:
            self.shutdown.wait(1)

        self.close()


    def stop(self, *ignored):
        self.shutdown.set()


    def close(self):
        """ Cancel any door movement in progress and close the sockets.
        """

        self.machine.close()
        self.rep.close()
        self.pub.close()

        stats = self.bridge.stats
        logger.info("door %s: stopped after %d accepted, %d rejected, %d dropped requests",
                    self.name, stats['accepted'], stats['rejected'], stats['dropped'])


# end of class Daemon



def _bind(socket_class, configured, cached, avoid):
    """ Instantiate *socket_class* on the *configured* port if there is one,
        otherwise try the *cached* port before falling back to automatic
        assignment.
    """

    if configured is not None:
        return socket_class(port=configured, avoid=avoid)

    if cached is not None and cached not in avoid:
        try:
            return socket_class(port=cached, avoid=avoid)
        except PortError:
            logger.debug("cached port %d unavailable, assigning a new one", cached)

    return socket_class(port=None, avoid=avoid)



def main(arguments=None):

    parser = argparse.ArgumentParser(description='Run the authoritative daemon for a door.')
    parser.add_argument('name', help='name of the door; also the topic prefix')
    parser.add_argument('--travel', type=float, default=None,
                        help='seconds the door spends moving between closed and open')
    parser.add_argument('--request-port', type=int, default=None,
                        help='port to receive requests on')
    parser.add_argument('--state-port', type=int, default=None,
                        help='port to publish states on')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable debug logging')

    parsed = parser.parse_args(arguments)

    if parsed.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        daemon = Daemon(parsed.name, parsed.travel, parsed.request_port, parsed.state_port)
    except PortError as e:
        logger.error("cannot start door %s: %s", parsed.name, e)
        return 1

    signal.signal(signal.SIGINT, daemon.stop)
    signal.signal(signal.SIGTERM, daemon.stop)

    daemon.run()
    return 0


if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
