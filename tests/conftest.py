import doorsync
import pytest


class Loopback:
    """ In-memory stand-in for the publish/subscribe transport. It acts as
        both the publisher and the subscriber handed to a doorsync.Bridge:
        every broadcast is recorded, and delivered synchronously to any
        callback registered for its topic.
    """

    def __init__(self):
        self.published = list()
        self.callbacks = dict()


    def publish(self, broadcast):
        self.published.append(broadcast)

        for callback in self.callbacks.get(broadcast.topic, ()):
            callback(broadcast)


    def register(self, callback, topic=None):
        self.callbacks.setdefault(topic, list()).append(callback)


    def send(self, topic, payload):
        """ Deliver a broadcast as if it arrived from a remote requester.
            Nothing is recorded in the published list.
        """

        broadcast = doorsync.protocol.message.Broadcast(topic, payload)

        for callback in self.callbacks.get(topic, ()):
            callback(broadcast)


    def on(self, topic):
        return [broadcast for broadcast in self.published if broadcast.topic == topic]


    def states(self, topic='door.state'):
        decode = doorsync.protocol.codec.decode_state
        return [decode(broadcast.payload) for broadcast in self.on(topic)]


    def diagnostics(self, topic='door.diagnostic'):
        loads = doorsync.json.loads
        return [loads(broadcast.payload) for broadcast in self.on(topic)]


# end of class Loopback



@pytest.fixture
def loopback():
    return Loopback()


@pytest.fixture
def home(tmp_path):
    """ Point the doorsync configuration directory at a scratch location,
        so that configuration files and cached ports do not leak between
        tests, or into the real home directory.
    """

    directory = str(tmp_path / 'doorsync')
    doorsync.config.directory(directory)
    return directory


@pytest.fixture
def machine():
    door = doorsync.DoorStateMachine()
    yield door
    door.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
