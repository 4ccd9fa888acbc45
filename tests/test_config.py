import os
import doorsync
import pytest


def test_directory(home):

    assert doorsync.config.directory() == home
    assert os.environ['DOORSYNC_HOME'] == home
    assert doorsync.home() == home

    with pytest.raises(ValueError):
        doorsync.config.directory('relative/path')


def test_defaults(home):

    configuration = doorsync.config.get('front')

    assert configuration.name == 'front'
    assert configuration['travel'] == 0.0
    assert configuration['request_port'] is None
    assert configuration['state_port'] is None
    assert configuration['address'] == 'localhost'


def test_cached(home):

    first = doorsync.config.get('front')
    second = doorsync.config.get('FRONT')

    assert first is second


def test_load_file(home):

    filename = os.path.join(home, 'door', 'front.json')
    os.makedirs(os.path.dirname(filename))
    doorsync.json.save(filename, {'travel': 2, 'state_port': 12000, 'unknown': True})

    configuration = doorsync.config.get('front')

    assert configuration['travel'] == 2.0
    assert configuration['state_port'] == 12000
    assert configuration['request_port'] is None
    assert 'unknown' not in configuration


def test_save_and_reload(home):

    configuration = doorsync.config.get('back')
    configuration['travel'] = 0.5
    configuration.save()

    reloaded = doorsync.config.Configuration('back')
    assert reloaded['travel'] == 0.5


def test_override(home):

    configuration = doorsync.config.get('side')
    configuration.override(travel=3.0, request_port=None)

    assert configuration['travel'] == 3.0
    assert configuration['request_port'] is None

    with pytest.raises(KeyError):
        configuration.override(bogus=1)


def test_copy_is_independent(home):

    shared = doorsync.config.get('side')
    copied = shared.copy()
    copied.override(travel=3.0, state_port=10400)

    assert copied['travel'] == 3.0
    assert copied['state_port'] == 10400
    assert copied.name == 'side'

    assert shared['travel'] == 0.0
    assert shared['state_port'] is None
    assert doorsync.config.get('side') is shared


def test_not_an_object(home):

    filename = os.path.join(home, 'door', 'broken.json')
    os.makedirs(os.path.dirname(filename))
    doorsync.json.save(filename, [1, 2, 3])

    with pytest.raises(ValueError):
        doorsync.config.Configuration('broken')


def test_ports(home):

    assert doorsync.config.load_ports('front') == (None, None)

    doorsync.config.save_ports('front', 10200, 10201)
    assert doorsync.config.load_ports('front') == (10200, 10201)

    doorsync.config.save_ports('front', state=10300)
    assert doorsync.config.load_ports('front') == (10200, 10300)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
