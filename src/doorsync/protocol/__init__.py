"""
doorsync Protocol Layer
=======================

This package defines how door records travel between a door daemon and its
requesters. It is organized in layers, and dependencies only flow downward.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Bridge / Client (doorsync.bridge, doorsync.client)
    │
    ▼
Transport (publish.py)
    ZeroMQ PUB/SUB sockets and their polling threads
    - Server   (PUB, bound)     states and diagnostics out
    - Listener (SUB, bound)     requests in
    - Client   (SUB, connected) requester view of states
    - Sender   (PUB, connected) requester requests out
    │
    ▼
Framing (message.py)
    Broadcast: topic, version, payload
    Topic naming for a single door
    JSON diagnostics
    │
    ▼
Codec (codec.py)
    DoorState / DoorRequest <-> bytes
    │
    ▼
Schema (schema.py)
    Field-numbered protobuf descriptors

---------------------------------------------------------------------
"""

from . import schema
from . import codec
from . import message
from . import publish

from .codec import encode, decode, decode_request, decode_state


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
