""" The door data model: the actuator status, the immutable state snapshot
    published on every accepted transition, and the request a session sends
    to claim or release the door.
"""

import enum
from dataclasses import dataclass


class DoorStatus(enum.IntEnum):
    """ Physical actuator state. The integer values are the wire values. """

    MOVING = 0
    CLOSED = 1
    OPEN = 2


class RequestMode(enum.IntEnum):
    """ What a session is asking for. The integer values are the wire values.
    """

    OPEN = 0
    RELEASE = 1



@dataclass(frozen=True)
class DoorState:
    """ A snapshot of the door: its *status*, and the ordered *sessions*
        currently holding it open. A snapshot is never modified; every
        accepted transition produces a new one.

        The *sessions* are non-empty if and only if the status is OPEN, and
        contain no duplicates. Any iterable of strings is accepted for
        *sessions*, it is always stored as a tuple.
    """

    status: DoorStatus = DoorStatus.CLOSED
    sessions: tuple = ()

    def __post_init__(self):

        status = DoorStatus(self.status)
        sessions = tuple(self.sessions)

        for session in sessions:
            _check_session(session)

        if len(set(sessions)) != len(sessions):
            raise ValueError('duplicate sessions in door state: ' + repr(sessions))

        if status == DoorStatus.OPEN:
            if len(sessions) == 0:
                raise ValueError('an open door must be held by at least one session')
        elif sessions:
            raise ValueError("a %s door cannot be held by any session" % (status.name))

        object.__setattr__(self, 'status', status)
        object.__setattr__(self, 'sessions', sessions)


    @classmethod
    def closed(cls):
        return cls(DoorStatus.CLOSED)


    @classmethod
    def moving(cls):
        return cls(DoorStatus.MOVING)


    @classmethod
    def open(cls, sessions):
        return cls(DoorStatus.OPEN, sessions)


    def to_dict(self):
        """ Return a JSON-friendly dictionary for diagnostics and display.
        """

        return {'status': self.status.name, 'sessions': list(self.sessions)}


# end of class DoorState



@dataclass(frozen=True)
class DoorRequest:
    """ A single request from *session* to OPEN or RELEASE the door. Requests
        are consumed once by the state machine and never retained.
    """

    mode: RequestMode
    session: str

    def __post_init__(self):
        _check_session(self.session)
        object.__setattr__(self, 'mode', RequestMode(self.mode))


# end of class DoorRequest



def _check_session(session):

    if isinstance(session, str):
        pass
    else:
        raise TypeError('session identifiers must be strings, not ' + type(session).__name__)

    if session == '':
        raise ValueError('session identifiers cannot be empty')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
