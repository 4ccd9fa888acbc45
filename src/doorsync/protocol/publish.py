""" Classes and methods implemented here implement the publish/subscribe
    transport for doorsync, using ZeroMQ PUB and SUB sockets.

    The door daemon binds both of its sockets: a :class:`Server` to publish
    states and diagnostics, and a :class:`Listener` to receive requests.
    Requesters connect to them with a :class:`Client` and a :class:`Sender`,
    respectively.
"""

import atexit
import logging
import queue
import threading
import weakref
import zmq

from ..errors import DecodingError, PortError
from . import message

logger = logging.getLogger(__name__)

minimum_port = 10139
maximum_port = 13679
zmq_context = zmq.Context()
_instances = weakref.WeakSet()


class Client:
    """ Establish a ZeroMQ SUB connection to a ZeroMQ PUB socket and receive
        broadcasts. Callbacks registered via :func:`register` are invoked
        from a single background thread, in the order broadcasts arrive.
    """

    def __init__(self, address, port):

        port = int(port)
        self.address = address
        self.port = port
        server = "tcp://%s:%d" % (address, port)

        self.socket = zmq_context.socket(zmq.SUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(server)
        self._start()


    def _start(self):

        self._poll_flush()

        self.callback_all = list()
        self.callback_specific = dict()
        self.callback_lock = threading.Lock()
        self.shutdown = False

        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()

        _instances.add(self)


    def close(self, timeout=2):
        """ Stop the background thread; the socket is closed by that thread
            on its way out.
        """

        self.shutdown = True
        if threading.current_thread() is not self.thread:
            self.thread.join(timeout)


    def propagate(self, broadcast):
        """ Invoke any/all callbacks registered via :func:`register` for
            a newly arrived :class:`doorsync.protocol.message.Broadcast`.
        """

        with self.callback_lock:
            references = list(self.callback_all)
            references.extend(self.callback_specific.get(broadcast.topic, ()))

        invalid = list()

        for reference in references:
            callback = reference()

            if callback is None:
                invalid.append(reference)
                continue

            try:
                callback(broadcast)
            except Exception:
                logger.exception("callback for %s failed", broadcast.topic)
                continue

        if invalid:
            self._forget(invalid)


    def _forget(self, invalid):
        """ Remove dead weak references, and any topic left without one.
        """

        with self.callback_lock:
            for reference in invalid:
                if reference in self.callback_all:
                    self.callback_all.remove(reference)

            for topic, references in list(self.callback_specific.items()):
                for reference in invalid:
                    if reference in references:
                        references.remove(reference)

                if len(references) == 0:
                    del self.callback_specific[topic]


    def _poll_flush(self, timeout=0.01):
        """ Poll the socket in an effort to make sure we're fully connected
            before proceeding. This is not deterministic, but has been
            observed to fix PUB/SUB subscription 'misses' where the client
            never receives any broadcast messages despite having subscribed
            normally. The *timeout* specified here is in seconds.
        """

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN|zmq.POLLOUT)
        poller.poll(timeout * 1000)


    def register(self, callback, topic=None):
        """ Register a callback that will be invoked every time a new broadcast
            arrives. If no topic is specified the callback will be invoked for
            all broadcasts. The topic is case-sensitive and must be an exact
            match. Only a weak reference to the callback is retained; a
            callback whose object is garbage collected is quietly dropped.

            :func:`subscribe` will be invoked for any/all topics registered
            with a callback, it does not need to be called separately.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        reference = _reference(callback)

        with self.callback_lock:
            if topic is None:
                self.callback_all.append(reference)
            else:
                topic = str(topic).strip()
                try:
                    callbacks = self.callback_specific[topic]
                except KeyError:
                    callbacks = list()
                    self.callback_specific[topic] = callbacks

                callbacks.append(reference)

        if topic is None:
            self.subscribe('')
        else:
            self.subscribe(topic)


    def run(self):

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        while self.shutdown == False:
            sockets = poller.poll(100)
            for active,flag in sockets:
                if self.socket == active:
                    parts = self.socket.recv_multipart()
                    self._pub_incoming(parts)

        self.socket.close()


    def _pub_incoming(self, parts):

        try:
            broadcast = message.Broadcast.from_parts(parts)
        except DecodingError as e:
            logger.warning("dropped broadcast: %s", e)
            return

        self.propagate(broadcast)


    def subscribe(self, topic):
        """ ZeroMQ subscriptions are based on a topic prefix, and filtering
            happens on the publishing side. The topic is given the same
            trailing dot that :class:`doorsync.protocol.message.Broadcast`
            adds on the wire, so only exact matches arrive. The empty string
            subscribes to everything.
        """

        if topic == '':
            topic = b''
        else:
            topic = (topic + '.').encode()

        self.socket.setsockopt(zmq.SUBSCRIBE, topic)


# end of class Client



class Listener(Client):
    """ A :class:`Client` that binds its SUB socket instead of connecting it,
        so that any number of :class:`Sender` instances can connect and
        deliver requests. The default behavior is to listen on all available
        network interfaces on the first available automatically assigned
        port; the *avoid* set enumerates port numbers that should not be
        automatically assigned.

        :ivar port: The port on which this listener accepts connections.
    """

    def __init__(self, port=None, avoid=()):

        self.address = '*'
        self.socket = zmq_context.socket(zmq.SUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.port = _bind(self.socket, port, avoid)
        self._start()


# end of class Listener



class Server:
    """ Send broadcasts via a ZeroMQ PUB socket, bound the same way as a
        :class:`Listener`. ZeroMQ sockets are not thread safe, and broadcasts
        can originate from any thread; :func:`publish` only enqueues the
        message, and a dedicated background thread puts it on the wire.

        :ivar port: The port on which this server is listening for connections.
    """

    def __init__(self, port=None, avoid=()):

        self.socket = zmq_context.socket(zmq.PUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.port = _bind(self.socket, port, avoid)

        self._queue = queue.SimpleQueue()

        internal = "inproc://publish.Server:signal:%d" % (id(self))
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.connect(internal)
        self._signal_lock = threading.Lock()

        self.shutdown = False
        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()

        _instances.add(self)


    def close(self, timeout=2):

        if self.shutdown == True:
            return

        self.shutdown = True

        with self._signal_lock:
            self._signal_tx.send(b'')

        self.thread.join(timeout)

        with self._signal_lock:
            self._signal_tx.close()


    def publish(self, broadcast):
        """ A *broadcast* is a :class:`doorsync.protocol.message.Broadcast`
            instance intended for any subscribers.
        """

        self._queue.put(broadcast)

        with self._signal_lock:
            self._signal_tx.send(b'')


    def _drain_signals(self):

        while True:
            try:
                self._signal_rx.recv(flags=zmq.NOBLOCK)
            except zmq.Again:
                break


    def _send_queued(self):

        while True:
            try:
                broadcast = self._queue.get(block=False)
            except queue.Empty:
                break

            self.socket.send_multipart(tuple(broadcast))


    def run(self):

        poller = zmq.Poller()
        poller.register(self._signal_rx, zmq.POLLIN)

        while self.shutdown == False:
            for active,flag in poller.poll(1000):
                if active == self._signal_rx:
                    self._drain_signals()

            try:
                self._send_queued()
            except zmq.ZMQError:
                logger.exception('failed to publish')

        self._signal_rx.close()
        self.socket.close()


# end of class Server



class Sender:
    """ Send broadcasts via a ZeroMQ PUB socket connected to a remote
        :class:`Listener`. A :class:`Sender` is intended for use by a single
        requester; the socket is guarded by a lock, and the send happens in
        the calling thread.
    """

    def __init__(self, address, port):

        port = int(port)
        self.address = address
        self.port = port
        server = "tcp://%s:%d" % (address, port)

        self.socket = zmq_context.socket(zmq.PUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(server)
        self.socket_lock = threading.Lock()
        _instances.add(self)

        # Same rationale as Client._poll_flush().
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLOUT)
        poller.poll(10)


    def close(self):
        with self.socket_lock:
            self.socket.close()


    def publish(self, broadcast):
        with self.socket_lock:
            self.socket.send_multipart(tuple(broadcast))


# end of class Sender



def _bind(socket, port=None, avoid=()):
    """ Bind *socket* to the requested *port* on all interfaces, or if *port*
        is None, to the first available port in the default range that is
        not in the *avoid* set. If every other port in the range is taken,
        an avoided port is better than none at all. Returns the bound port.
    """

    if port is None:
        minimum = minimum_port
        maximum = maximum_port
    else:
        port = int(port)
        minimum = port
        maximum = port

    avoided = list()
    trial = minimum

    while trial <= maximum:
        if port is None and trial in avoid:
            avoided.append(trial)
            trial += 1
            continue

        try:
            socket.bind('tcp://*:' + str(trial))
        except zmq.error.ZMQError:
            # Assume this port is in use.
            trial += 1
        else:
            return trial

    for trial in avoided:
        try:
            socket.bind('tcp://*:' + str(trial))
        except zmq.error.ZMQError:
            continue
        else:
            return trial

    socket.close()

    if port is None:
        error = "no ports available in range %d:%d" % (minimum, maximum)
    else:
        error = 'port already in use: ' + str(port)

    raise PortError(error)



def _reference(thing):
    """ Return a weak reference to the supplied callback, regardless of
        whether it is a plain function or a bound method; a plain
        :func:`weakref.ref` to a bound method dies immediately.
    """

    try:
        thing.__func__
        thing.__self__
    except AttributeError:
        return weakref.ref(thing)
    else:
        return weakref.WeakMethod(thing)



def shutdown():
    """ Close every socket still open in this process. Registered to run
        at exit, so that the background threads are not left polling sockets
        in a terminating context.
    """

    for instance in list(_instances):
        instance.close()


atexit.register(shutdown)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
