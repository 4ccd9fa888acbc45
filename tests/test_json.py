import json
import os
import doorsync


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_doorsync_encode_and_decode():
    encode_and_decode(doorsync.json.dumps, doorsync.json.loads)


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['list'] = [1, 2, 3, 'a', 'b', None, 'c', 'z']
    input_dictionary['dict'] = {'one': 1, 'two': 2.5}
    input_dictionary['none'] = None
    input_dictionary['true'] = True
    input_dictionary['false'] = False

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    # The encoded JSON is not compared against a pre-set notion of what it
    # should look like; whitespace handling varies between the libraries
    # doorsync.json may select.

    decoded = loads(encoded)
    assert decoded == input_dictionary


def test_save_and_load(tmp_path):

    filename = str(tmp_path / 'saved.json')
    contents = {'travel': 1.5, 'request_port': None}

    doorsync.json.save(filename, contents)

    assert os.path.exists(filename)
    assert not os.path.exists(filename + '.tmp')
    assert doorsync.json.load(filename) == contents


def test_load_missing(tmp_path):

    filename = str(tmp_path / 'missing.json')
    assert doorsync.json.load(filename) is None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
