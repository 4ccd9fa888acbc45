""" The authoritative door model. A :class:`DoorStateMachine` accepts
    :class:`doorsync.DoorRequest` instances, enforces which transitions are
    legal, and produces a new :class:`doorsync.DoorState` snapshot for every
    accepted transition.
"""

import logging
import threading

from . import actuator
from . import errors
from .door import DoorState, DoorStatus, RequestMode
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class DoorStateMachine:
    """ State machine for a single door. The *travel* argument is the time,
        in seconds, the actuator spends MOVING between CLOSED and OPEN; when
        it is zero the movement completes before :func:`handle` returns.
        The optional *state* argument seeds the machine with something other
        than the default CLOSED state, which is mostly useful for testing.

        All transitions are serialized by an internal lock, and listeners
        registered via :func:`register` are notified of every snapshot while
        that lock is held, so that listeners observe snapshots in exactly the
        order they were produced. Listeners should be quick; publishing to a
        :class:`doorsync.protocol.publish.Server` only enqueues the message.

        :ivar travel: Duration of the MOVING phase, in seconds.
    """

    def __init__(self, travel=0, state=None):

        travel = float(travel)
        if travel < 0:
            raise ValueError('travel time cannot be negative: ' + repr(travel))

        if state is None:
            state = DoorState.closed()
        elif state.status == DoorStatus.MOVING:
            raise ValueError('a state machine cannot start in motion')

        self.travel = travel
        self._lock = threading.RLock()
        self._listeners = list()
        self._moving = None
        self._registry = SessionRegistry(state.sessions)
        self._state = state


    @property
    def state(self):
        """ The current :class:`doorsync.DoorState` snapshot. """
        return self._state


    @property
    def moving(self):
        """ The pending :class:`doorsync.actuator.Travel`, if the door is
            currently in motion with a non-zero travel time.
        """

        return self._moving


    def close(self):
        """ Cancel any pending travel. The door remains MOVING; no further
            transition will complete on its own.
        """

        with self._lock:
            moving = self._moving
            self._moving = None

        if moving is not None:
            moving.cancel()
            logger.debug("cancelled %r", moving)


    def handle(self, request):
        """ Apply a single *request* and return the resulting state. Raises
            :class:`doorsync.errors.Busy` or
            :class:`doorsync.errors.InvalidRelease` if the request is
            rejected, in which case the state is unchanged.
        """

        if request.mode == RequestMode.OPEN:
            return self.open(request.session)
        elif request.mode == RequestMode.RELEASE:
            return self.release(request.session)
        else:
            raise ValueError('unhandled request mode: ' + repr(request.mode))


    def open(self, session):
        """ Claim the door for *session*. A closed door starts moving toward
            OPEN; an open door gains another holder.
        """

        with self._lock:
            status = self._state.status

            if status == DoorStatus.MOVING:
                raise errors.Busy('the door is moving', self._state, session=session, mode='OPEN')

            if status == DoorStatus.OPEN:
                self._registry.add(session)
                return self._emit(DoorState.open(self._registry.all()))

            self._emit(DoorState.moving())
            return self._begin(DoorStatus.OPEN, session)


    def register(self, listener):
        """ Register a callable that receives every new state snapshot.
        """

        if callable(listener):
            pass
        else:
            raise TypeError('listener must be callable')

        self._listeners.append(listener)


    def release(self, session):
        """ Drop the claim held by *session*. When the last claim is released
            the door starts moving toward CLOSED.
        """

        with self._lock:
            status = self._state.status

            if status != DoorStatus.OPEN:
                raise errors.InvalidRelease("the door is %s" % (status.name), self._state, session=session, mode='RELEASE')

            if session in self._registry:
                pass
            else:
                raise errors.InvalidRelease('no claim held by ' + repr(session), self._state, session=session, mode='RELEASE')

            self._registry.remove(session)

            if self._registry.is_empty():
                self._emit(DoorState.moving())
                return self._begin(DoorStatus.CLOSED)

            return self._emit(DoorState.open(self._registry.all()))


    def _arrive(self, travel):
        """ Complete a movement. This is the callback for a
            :class:`doorsync.actuator.Travel`, and is also invoked directly
            when there is no travel time.
        """

        with self._lock:
            if self._moving is not travel:
                # Cancelled, or superseded; either way, not ours to finish.
                return self._state

            self._moving = None

            if travel.target == DoorStatus.OPEN:
                self._registry.add(travel.session)
                state = DoorState.open(self._registry.all())
            else:
                self._registry.clear()
                state = DoorState.closed()

            return self._emit(state)


    def _begin(self, target, session=None):
        """ Start moving toward *target*. Must be called with the lock held,
            after the MOVING snapshot has been emitted.
        """

        if self.travel == 0:
            travel = _Immediate(target, session)
            self._moving = travel
            return self._arrive(travel)

        travel = actuator.Travel(self.travel, target, self._arrive, session)
        self._moving = travel
        logger.debug("started %r", travel)
        return self._state


    def _emit(self, state):
        """ Replace the current state and notify listeners. Must be called
            with the lock held.
        """

        self._state = state

        for listener in tuple(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("state listener %r failed", listener)

        return state


# end of class DoorStateMachine



class _Immediate:
    """ Stand-in for a :class:`doorsync.actuator.Travel` when the travel
        time is zero.
    """

    def __init__(self, target, session=None):
        self.target = target
        self.session = session


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
