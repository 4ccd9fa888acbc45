''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`. JSON is used
    for diagnostic payloads and for the per-door configuration files; the
    door records themselves use the protobuf wire format.
'''

import os

# Prefer msgspec, then orjson, then the standard library.

msgspec = None
orjson = None
json = None

try:
    import msgspec
except ImportError:
    pass

if msgspec is None:
    try:
        import orjson
    except ImportError:
        pass

if msgspec is None and orjson is None:
    import json


# Every 'dumps' implementation returns bytes, matching msgspec and orjson.

def json_dumps(*args, **kwargs):
    return json.dumps(*args, **kwargs).encode()

if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode
    DecodeError = msgspec.DecodeError
elif orjson is not None:
    dumps = orjson.dumps
    loads = orjson.loads
    DecodeError = orjson.JSONDecodeError
else:
    dumps = json_dumps
    loads = json.loads
    DecodeError = json.JSONDecodeError



def load(filename):
    """ Read and decode the JSON contents of *filename*. A missing file is
        not an error, None is returned instead.
    """

    try:
        contents = open(filename, 'rb').read()
    except FileNotFoundError:
        return None

    return loads(contents)



def save(filename, contents):
    """ Encode *contents* as JSON and write the result to *filename*. The
        file is written to a temporary location first and moved into place,
        so that a concurrent :func:`load` never sees a partial file.
    """

    encoded = dumps(contents)
    temporary = filename + '.tmp'

    with open(temporary, 'wb') as writer:
        writer.write(encoded)

    os.replace(temporary, filename)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
