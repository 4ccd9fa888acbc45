""" Per-door configuration, and the on-disk cache of the ports a door daemon
    last bound. Configuration files live in ``<directory>/door/<name>.json``;
    cached ports live in ``<directory>/daemon/port/<name>.req`` and
    ``<name>.pub``. See :func:`directory` for where ``<directory>`` is.
"""

import copy
import os
import threading

from . import json


_cache = dict()
_cache_lock = threading.Lock()

defaults = dict()
defaults['address'] = 'localhost'
defaults['request_port'] = None
defaults['state_port'] = None
defaults['travel'] = 0.0


class Configuration:
    """ A convenience class to represent the configuration of a single door.
        To first order an instance acts like a dictionary; any value not
        present in the configuration file falls back to the module-level
        :data:`defaults`.
    """

    def __init__(self, name):

        name = str(name).strip().lower()
        if name == '':
            raise ValueError('a door name is required')

        self.name = name
        self.filename = os.path.join(directory(), 'door', name + '.json')
        self._values = dict(defaults)
        self.load()


    def __contains__(self, key):
        return key in self._values


    def __getitem__(self, key):
        return self._values[key]


    def __setitem__(self, key, value):

        if key in defaults:
            pass
        else:
            raise KeyError('unknown configuration key: ' + repr(key))

        self._values[key] = value


    def copy(self):
        """ Return an independent copy of this configuration; changes to the
            copy, such as command-line overrides, do not affect the instance
            shared via :func:`get`.
        """

        duplicate = copy.copy(self)
        duplicate._values = dict(self._values)
        return duplicate


    def get(self, key, default=None):
        return self._values.get(key, default)


    def load(self):
        """ (Re)load the configuration file, if there is one. Unrecognized
            keys are ignored so that older daemons can share a directory
            with newer ones.
        """

        loaded = json.load(self.filename)

        if loaded is None:
            return

        if isinstance(loaded, dict):
            pass
        else:
            raise ValueError("configuration in %s is not a JSON object" % (self.filename))

        for key in defaults.keys():
            try:
                self._values[key] = loaded[key]
            except KeyError:
                pass

        self._values['travel'] = float(self._values['travel'])


    def save(self):
        """ Write the current values to the configuration file.
        """

        os.makedirs(os.path.dirname(self.filename), mode=0o775, exist_ok=True)
        json.save(self.filename, self._values)


    def override(self, **overrides):
        """ Replace any configured values with the non-None *overrides*;
            this is how command-line arguments take precedence over the
            configuration file.
        """

        for key, value in overrides.items():
            if value is None:
                continue
            self[key] = value


# end of class Configuration



def directory(default=None):
    """ Return the directory location where we should be loading and/or saving
        configuration files. This defaults to ``$HOME/.doorsync``, but can be
        overridden by calling this method with a valid path, or by setting
        the ``DOORSYNC_HOME`` environment variable. Note that changes to the
        environment variable will be ignored unless it is set prior to the
        first invocation of this method.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        os.makedirs(default, mode=0o775, exist_ok=True)

        os.environ['DOORSYNC_HOME'] = default
        directory.found = default

        with _cache_lock:
            _cache.clear()


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['DOORSYNC_HOME']
    except KeyError:
        pass
    else:
        directory.found = found
        return found

    try:
        home = os.environ['HOME']
    except KeyError:
        raise RuntimeError('DOORSYNC_HOME and HOME environment variables not set, cannot determine doorsync configuration directory')

    found = os.path.join(home, '.doorsync')

    directory.found = found
    return found

directory.found = None



def get(name):
    """ Retrieve the locally cached :class:`Configuration` instance for the
        door called *name*, loading it on first use.
    """

    name = str(name).strip().lower()

    with _cache_lock:
        try:
            config = _cache[name]
        except KeyError:
            config = Configuration(name)
            _cache[name] = config

    return config



def load_ports(name):
    """ Return the request and state port numbers, if any, that were last
        used by the daemon for the door called *name*. The numbers are
        returned as a two-item tuple (request, state); None is returned for
        a value that cannot be retrieved.
    """

    port_directory = _port_directory()
    request = _read_port(os.path.join(port_directory, name + '.req'))
    state = _read_port(os.path.join(port_directory, name + '.pub'))

    return (request, state)



def save_ports(name, request=None, state=None):
    """ Save the request and/or state port number to the local disk cache
        for future restarts of the daemon, and for clients looking for it.
    """

    port_directory = _port_directory()
    os.makedirs(port_directory, mode=0o775, exist_ok=True)

    if request is not None:
        _write_port(os.path.join(port_directory, name + '.req'), request)

    if state is not None:
        _write_port(os.path.join(port_directory, name + '.pub'), state)



def _port_directory():
    return os.path.join(directory(), 'daemon', 'port')


def _read_port(filename):

    try:
        with open(filename, 'r') as reader:
            port = reader.read()
    except FileNotFoundError:
        return None

    port = port.strip()

    try:
        port = int(port)
    except ValueError:
        return None

    return port


def _write_port(filename, port):

    with open(filename, 'w') as writer:
        writer.write(str(int(port)) + '\n')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
