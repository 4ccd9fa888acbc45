""" Exceptions raised by doorsync components. Every error that can arise
    while handling a single message derives from :class:`DoorError`; none of
    them are fatal to a running daemon, the offending message is discarded.
"""

import time


class DoorError(Exception):
    """ Base class for all doorsync errors. The *details* dictionary, if
        provided, is carried along into :func:`to_dict` so that a rejection
        can be reported back to the requester with some context. A rejected
        request also carries the unchanged :class:`doorsync.DoorState` as
        *state*, captured at the moment of rejection.
    """

    def __init__(self, text, state=None, **details):
        Exception.__init__(self, text)
        self.text = text
        self.state = state
        self.details = details


    def to_dict(self):
        """ Return a JSON-friendly dictionary describing this error, using
            the same *type* and *text* fields found in every diagnostic.
        """

        error = dict()
        error['type'] = self.__class__.__name__
        error['text'] = self.text
        error['time'] = time.time()
        error.update(self.details)

        return error


# end of class DoorError



class EncodingError(DoorError):
    """ A record could not be represented on the wire. """


class DecodingError(DoorError):
    """ Inbound bytes were malformed, truncated, used an unknown enumerated
        value, or described a record that violates the data model.
    """


class Busy(DoorError):
    """ The door is moving and cannot accept an OPEN request. """


class InvalidRelease(DoorError):
    """ A RELEASE request arrived without a matching claim, or while the
        door was not open.
    """


class PortError(DoorError):
    """ No suitable port could be bound for a listening socket. """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
