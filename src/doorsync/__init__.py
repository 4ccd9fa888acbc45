""" Python implementation of doorsync. This includes the authoritative door
    state machine, the publish/subscribe bridge that exposes it, and the
    client functions used to request that the door open or be released.
"""

# Utility components.

from . import json
from . import errors

# Data model and the components that own it.

from .door import DoorStatus, RequestMode, DoorState, DoorRequest
from . import registry
from . import actuator
from . import machine

# Submodules used by multiple other components.

from . import protocol
from . import config
home = config.directory

# Primary public-facing interfaces.

from .machine import DoorStateMachine
from .bridge import Bridge
from .client import Door
from .daemon import Daemon

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
