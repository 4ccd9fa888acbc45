""" Bookkeeping for the sessions that currently hold the door open.
"""


class SessionRegistry:
    """ An insertion-ordered set of session identifiers. Iteration and
        :func:`all` return sessions in the order they first claimed the door,
        so that published states are deterministic. A :class:`SessionRegistry`
        is owned by exactly one :class:`doorsync.machine.DoorStateMachine`
        and is not protected by a lock of its own.
    """

    def __init__(self, sessions=()):

        # dict keys preserve insertion order; the values are unused.
        self._sessions = dict()

        for session in sessions:
            self.add(session)


    def __contains__(self, session):
        return session in self._sessions


    def __iter__(self):
        return iter(tuple(self._sessions))


    def __len__(self):
        return len(self._sessions)


    def __repr__(self):
        return 'SessionRegistry(%r)' % (self.all(),)


    def add(self, session):
        """ Add *session*. Adding a session that is already present is a
            no-op, and does not change its position in the ordering.
        """

        self._sessions[session] = None


    def all(self):
        return tuple(self._sessions)


    def clear(self):
        self._sessions.clear()


    def contains(self, session):
        return session in self._sessions


    def is_empty(self):
        return len(self._sessions) == 0


    def remove(self, session):
        """ Remove *session*, if present. Removing an absent session is
            not an error.
        """

        self._sessions.pop(session, None)


# end of class SessionRegistry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
