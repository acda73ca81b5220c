# Copyright (c) 2017-2025 The Khronos Group Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from collections.abc import Sequence, Mapping
from . import decoder

import typing
import json


class TensorShape:

    def __init__(self, dimensions=()):
        # type: (typing.Iterable[int])->None
        self._dimensions = tuple(dimensions)

    @property
    def dimensions(self):
        # type: ()->typing.Tuple[int, ...]
        return self._dimensions

    @property
    def rank(self):
        return len(self._dimensions)

    def __eq__(self, other):
        return isinstance(other, TensorShape) and self._dimensions == other._dimensions

    def __hash__(self):
        return hash(self._dimensions)

    def __repr__(self):
        return 'TensorShape({})'.format(list(self._dimensions))

    def __str__(self):
        return '[' + ','.join(str(dimension) for dimension in self._dimensions) + ']'


class TensorType:

    def __init__(self, data_type, shape):
        # type: (str, TensorShape)->None
        assert isinstance(data_type, str)
        assert isinstance(shape, TensorShape)
        self._data_type = data_type
        self._shape = shape

    @property
    def data_type(self):
        # type: ()->str
        return self._data_type

    @property
    def shape(self):
        # type: ()->TensorShape
        return self._shape

    def __repr__(self):
        return 'TensorType({})'.format(str(self))

    def __str__(self):
        return self._data_type + str(self._shape)


class Initializer:
    """
    Constant tensor data embedded in the model, attached to a Connection.

    The raw bytes are kept as they are in the model and only decoded on request; 'value'
    decodes everything while str() decodes a preview bounded by decoder.PREVIEW_LIMIT.
    """

    def __init__(self,
                 index,         # type: int
                 name,          # type: typing.Optional[str]
                 type,          # type: TensorType
                 data,          # type: bytes
                 ):
        # type: (...)->None
        assert isinstance(type, TensorType)
        assert data is not None and len(data) != 0, "initializer data must not be empty"
        self._index = index
        self._name = name
        self._type = type
        self._data = bytes(data)

    @property
    def id(self):
        # type: ()->str
        return str(self._index)

    @property
    def name(self):
        # type: ()->typing.Optional[str]
        return self._name

    @property
    def type(self):
        # type: ()->TensorType
        return self._type

    @property
    def data(self):
        # type: ()->bytes
        return self._data

    @property
    def state(self):
        # type: ()->typing.Optional[str]
        return decoder.state(self._data, self._type.data_type, self._type.shape.dimensions)

    @property
    def value(self):
        return self._decode(decoder.UNBOUNDED_LIMIT)

    def preview(self, limit=decoder.PREVIEW_LIMIT):
        return self._decode(limit)

    def _decode(self, limit):
        ctx = decoder.context(self._data, self._type.data_type, self._type.shape.dimensions)
        return decoder.values(ctx, limit) if ctx.state is None else None

    def __repr__(self):
        return self._name if self._name is not None else self.id

    def __str__(self):
        preview = self.preview()
        return json.dumps(preview, indent=4) if preview is not None else ''


# noinspection PyProtectedMember
class Connection:

    def __init__(self,
                 graph,                 # type: Graph
                 id,                    # type: str
                 type=None,             # type: typing.Optional[TensorType]
                 initializer=None,      # type: typing.Optional[Initializer]
                 quantization=None,     # type: typing.Optional[str]
                 ):
        # type: (...)->None
        assert isinstance(graph, Graph)
        assert isinstance(id, str)
        assert (type is None) != (initializer is None), "connection type comes either from itself or its initializer"
        self._graph = graph
        self._id = id
        self._type = type
        self._initializer = initializer
        self._quantization = quantization

        self._key = len(graph._connections)
        graph._connections.append(self)

    @property
    def graph(self):
        # type: ()->Graph
        return self._graph

    @property
    def key(self):
        # type: ()->int
        return self._key

    @property
    def id(self):
        # type: ()->str
        return self._id

    @property
    def type(self):
        # type: ()->TensorType
        return self._initializer.type if self._initializer is not None else self._type

    @property
    def initializer(self):
        # type: ()->typing.Optional[Initializer]
        return self._initializer

    @property
    def quantization(self):
        # type: ()->typing.Optional[str]
        return self._quantization

    def __repr__(self):
        return self._id

    def __str__(self):
        return '{id}: {type}'.format(id=self._id, type=str(self.type))


# noinspection PyProtectedMember
class Argument:

    def __init__(self,
                 graph,         # type: Graph
                 name,          # type: str
                 visible,       # type: bool
                 keys,          # type: typing.Iterable[int]
                 ):
        # type: (...)->None
        assert isinstance(graph, Graph)
        self._graph = graph
        self._name = name
        self._visible = visible
        self._keys = tuple(keys)
        assert all(0 <= key < len(graph._connections) for key in self._keys)

    @property
    def name(self):
        # type: ()->str
        return self._name

    @property
    def visible(self):
        # type: ()->bool
        return self._visible

    @property
    def keys(self):
        # type: ()->typing.Tuple[int, ...]
        return self._keys

    @property
    def connections(self):
        # type: ()->typing.Tuple[Connection, ...]
        return tuple(self._graph._connections[key] for key in self._keys)

    def __repr__(self):
        return '{name}: [{connections}]'.format(name=self._name,
                                                connections=', '.join(repr(c) for c in self.connections))


class Attribute:

    def __init__(self,
                 name,          # type: str
                 value,         # type: typing.Any
                 type=None,     # type: typing.Optional[str]
                 visible=True,  # type: bool
                 ):
        # type: (...)->None
        self._name = name
        self._value = value
        self._type = type
        self._visible = visible

    @property
    def name(self):
        # type: ()->str
        return self._name

    @property
    def value(self):
        return self._value

    @property
    def type(self):
        # type: ()->typing.Optional[str]
        return self._type

    @property
    def visible(self):
        # type: ()->bool
        return self._visible

    @property
    def text(self):
        # type: ()->str
        return format_value(self._value)

    def __repr__(self):
        return '{}={}'.format(self._name, self.text)


# noinspection PyProtectedMember
class Node:

    def __init__(self,
                 graph,             # type: Graph
                 operator,          # type: str
                 inputs=(),         # type: typing.Iterable[Argument]
                 outputs=(),        # type: typing.Iterable[Argument]
                 attributes=(),     # type: typing.Iterable[Attribute]
                 category=None,     # type: typing.Optional[str]
                 custom=False,      # type: bool
                 ):
        # type: (...)->None
        assert isinstance(graph, Graph)
        assert isinstance(operator, str), "got '{}'".format(operator)
        self._graph = graph
        self._operator = operator
        self._inputs = tuple(inputs)
        self._outputs = tuple(outputs)
        self._attributes = tuple(attributes)
        self._category = category
        self._custom = custom

        graph._nodes.append(self)
        graph._operators[operator] = graph._operators.get(operator, 0) + 1

    @property
    def graph(self):
        # type: ()->Graph
        return self._graph

    @property
    def operator(self):
        # type: ()->str
        return self._operator

    @property
    def category(self):
        # type: ()->typing.Optional[str]
        return self._category

    @property
    def custom(self):
        # type: ()->bool
        return self._custom

    @property
    def inputs(self):
        # type: ()->typing.Tuple[Argument, ...]
        return self._inputs

    @property
    def outputs(self):
        # type: ()->typing.Tuple[Argument, ...]
        return self._outputs

    @property
    def attributes(self):
        # type: ()->typing.Tuple[Attribute, ...]
        return tuple(attribute for attribute in self._attributes if attribute.visible)

    @property
    def all_attributes(self):
        # type: ()->typing.Tuple[Attribute, ...]
        return self._attributes

    def __repr__(self):
        return self._operator

    def __str__(self):
        return '{outputs} = {op}{{{attribs}}}({inputs})'.format(
            op=self._operator,
            inputs=', '.join(repr(argument) for argument in self._inputs),
            outputs=', '.join(repr(argument) for argument in self._outputs),
            attribs=', '.join(repr(attribute) for attribute in self.attributes))


# noinspection PyProtectedMember
class Graph:

    def __init__(self, model, name=''):
        # type: (Model, str)->None
        self._model = model
        self._name = name
        self._connections = []
        self._nodes = []
        self._inputs = ()
        self._outputs = ()
        self._operators = {}

        assert isinstance(model, Model)
        model._graphs.append(self)

    @property
    def model(self):
        # type: ()->Model
        return self._model

    @property
    def name(self):
        # type: ()->str
        return self._name

    @property
    def connections(self):
        # type: ()->typing.Sequence[Connection]
        return _ListView(self._connections)

    @property
    def nodes(self):
        # type: ()->typing.Sequence[Node]
        return _ListView(self._nodes)

    @property
    def inputs(self):
        # type: ()->typing.Tuple[Argument, ...]
        return self._inputs

    @property
    def outputs(self):
        # type: ()->typing.Tuple[Argument, ...]
        return self._outputs

    @property
    def operators(self):
        # type: ()->typing.Mapping[str, int]
        return _DictView(self._operators)

    def _set_io(self, inputs, outputs):
        self._inputs = tuple(inputs)
        self._outputs = tuple(outputs)

    def __repr__(self):
        return self._name if self._name else _hex_id(self)


# noinspection PyProtectedMember
class Model:

    def __init__(self, format, version, description=None):
        # type:(str, str, typing.Optional[str])->None
        self._graphs = []
        self._format = format
        self._version = version
        self._description = description if description else None

    @property
    def format(self):
        # type: ()->str
        return self._format

    @property
    def version(self):
        # type: ()->str
        return self._version

    @property
    def description(self):
        # type: ()->typing.Optional[str]
        return self._description

    @property
    def graphs(self):
        # type: ()->typing.Sequence[Graph]
        return _ListView(self._graphs)

    @property
    def main(self):
        # type: ()->typing.Optional[Graph]
        return self._graphs[0] if len(self._graphs) else None

    def __repr__(self):
        return self._format

    def print(self, file=None, values=False):
        print('model {} {{'.format(self._format), file=file)
        if self._description is not None:
            print('\tdescription: {}'.format(self._description), file=file)

        for i, graph in enumerate(self._graphs):
            print('\tgraph{} {} {{'.format(i, repr(graph)), file=file)

            print('\t\tinputs {', file=file)
            for argument in graph.inputs:
                for connection in argument.connections:
                    print('\t\t\t' + str(connection) + ',', file=file)
            print('\t\t}', file=file)

            print('\t\toutputs {', file=file)
            for argument in graph.outputs:
                for connection in argument.connections:
                    print('\t\t\t' + str(connection) + ',', file=file)
            print('\t\t}', file=file)

            initialized = [connection for connection in graph.connections if connection.initializer is not None]
            if len(initialized):
                print('\t\tparams {', file=file)
                for connection in initialized:
                    print('\t\t\t' + str(connection) + ',', file=file)
                    if values:
                        for line in str(connection.initializer).splitlines():
                            print('\t\t\t\t' + line, file=file)
                print('\t\t}', file=file)

            print('\t\toperators {', file=file)
            for node in graph.nodes:
                print('\t\t\t' + str(node) + ',', file=file)
            print('\t\t}', file=file)

            print('\t\tcounts {', file=file)
            for operator, count in sorted(graph.operators.items()):
                print('\t\t\t{}: {},'.format(operator, count), file=file)
            print('\t\t}', file=file)

            print('\t}', file=file)

        print('}', file=file)


class _ListView(Sequence):

    def __init__(self, lst):
        self._list = lst

    def __len__(self):
        return self._list.__len__()

    def __getitem__(self, item):
        return self._list.__getitem__(item)

    def __iter__(self):
        return self._list.__iter__()

    def __repr__(self):
        return self._list.__repr__()

    def __str__(self):
        return self._list.__str__()

    def __contains__(self, item):
        return self._list.__contains__(item)

    def __reversed__(self):
        return reversed(self._list)


class _DictView(Mapping):

    def __init__(self, dct):
        self._dict = dct

    def __len__(self):
        return self._dict.__len__()

    def __getitem__(self, key):
        return self._dict.__getitem__(key)

    def __iter__(self):
        return self._dict.__iter__()

    def __repr__(self):
        return self._dict.__repr__()


def format_value(value):
    if isinstance(value, (list, tuple)):
        return '[' + ', '.join(format_value(item) for item in value) + ']'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _hex_id(obj):
    return '@' + hex(id(obj))[2:]
