""" Model of the physical door travel between CLOSED and OPEN. A
    :class:`Travel` instance stands in for the actuator-complete signal:
    after the requested duration it calls back into the state machine,
    unless it was cancelled first.
"""

import threading
import time


class Travel:
    """ Background thread that waits *duration* seconds and then invokes
        *arrive* with this :class:`Travel` instance as its only argument.
        The *target* is the :class:`doorsync.DoorStatus` the door is moving
        toward, and *session* is the claimant that will hold the door once
        it arrives, if any.

        Calling :func:`cancel` before the duration elapses guarantees that
        *arrive* is never invoked. The callback itself must still confirm
        that this travel is the one it expects, as a cancellation can race
        with the end of the wait.
    """

    def __init__(self, duration, target, arrive, session=None):

        self.duration = float(duration)
        self.target = target
        self.session = session
        self.started = time.time()
        self.arrive = arrive

        self.cancelled = False
        self.arrived = False

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def __repr__(self):
        return "Travel(%s, %.3fs, session=%r)" % (self.target.name, self.duration, self.session)


    def cancel(self):
        self.cancelled = True
        self.alarm.set()


    def remaining(self):
        """ Return the number of seconds until this travel completes; zero
            if it has already completed or was cancelled.
        """

        if self.cancelled or self.arrived:
            return 0

        remaining = self.started + self.duration - time.time()

        if remaining < 0:
            remaining = 0

        return remaining


    def run(self):

        self.alarm.wait(self.duration)

        if self.cancelled == True:
            return

        self.arrived = True
        self.arrive(self)


    def wait(self, timeout=None):
        """ Block until the travel thread exits. Returns True if it did,
            False if the *timeout* expired first.
        """

        self.thread.join(timeout)
        return not self.thread.is_alive()


# end of class Travel


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
