""" Protobuf message classes for the door records. The equivalent ``.proto``
    description is::

        syntax = "proto3";
        package doorsync;

        message DoorState {
            enum Status {
                MOVING = 0;
                CLOSED = 1;
                OPEN = 2;
            }

            Status status = 1;
            repeated string sessions = 2;
        }

        message DoorRequest {
            enum Mode {
                OPEN = 0;
                RELEASE = 1;
            }

            Mode mode = 1;
            string session = 2;
        }

    Rather than ship generated code, the descriptors are assembled here at
    import time and registered in a private descriptor pool. The field
    numbers are the wire contract and must never be reassigned.
"""

from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool
from google.protobuf import message_factory

from ..door import DoorStatus, RequestMode

package = 'doorsync'
filename = 'doorsync/door.proto'

_Field = descriptor_pb2.FieldDescriptorProto


def _add_enum(message, name, enumeration):
    """ Describe a nested enum from a Python :class:`enum.IntEnum`, so the
        two can never disagree on names or values.
    """

    nested = message.enum_type.add()
    nested.name = name

    for member in enumeration:
        value = nested.value.add()
        value.name = member.name
        value.number = member.value


def _add_field(message, name, number, type, label=_Field.LABEL_OPTIONAL, type_name=None):

    field = message.field.add()
    field.name = name
    field.number = number
    field.type = type
    field.label = label

    if type_name is not None:
        field.type_name = type_name


def _describe():

    described = descriptor_pb2.FileDescriptorProto()
    described.name = filename
    described.package = package
    described.syntax = 'proto3'

    state = described.message_type.add()
    state.name = 'DoorState'
    _add_enum(state, 'Status', DoorStatus)
    _add_field(state, 'status', 1, _Field.TYPE_ENUM, type_name='.doorsync.DoorState.Status')
    _add_field(state, 'sessions', 2, _Field.TYPE_STRING, label=_Field.LABEL_REPEATED)

    request = described.message_type.add()
    request.name = 'DoorRequest'
    _add_enum(request, 'Mode', RequestMode)
    _add_field(request, 'mode', 1, _Field.TYPE_ENUM, type_name='.doorsync.DoorRequest.Mode')
    _add_field(request, 'session', 2, _Field.TYPE_STRING)

    return described


pool = descriptor_pool.DescriptorPool()
pool.AddSerializedFile(_describe().SerializeToString())

DoorState = message_factory.GetMessageClass(pool.FindMessageTypeByName(package + '.DoorState'))
DoorRequest = message_factory.GetMessageClass(pool.FindMessageTypeByName(package + '.DoorRequest'))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
