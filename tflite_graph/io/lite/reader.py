# Copyright (c) 2020 The Khronos Group Inc.
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

from .helpers import *
from .metadata import OperatorMetadata
from ...model import *
from flatbuffers import flexbuffers
import logging
import struct


class TFLiteFormatError(Exception):

    def __init__(self, message, details=None):
        Exception.__init__(self, message)
        self.details = details


def _printable_identifier(data):
    identifier = bytes(data[4:8]) if len(data) >= 8 else b''
    return identifier.decode('ascii') if len(identifier) == 4 and all(32 <= c <= 127 for c in identifier) else ''


def _get_quantization_text(tensor):
    quant = tensor.Quantization()
    if quant is None:
        return None

    scale = float(quant.Scale(0)) if quant.ScaleLength() == 1 else 0.0
    zero_point = int(quant.ZeroPoint(0)) if quant.ZeroPointLength() == 1 else 0

    text = 'q'
    if scale != 0 or zero_point != 0:
        text = format_number(scale) + ' * ' + ('q' if zero_point == 0 else '(q - ' + str(zero_point) + ')')
    if quant.MinLength() == 1:
        text = format_number(float(quant.Min(0))) + ' ≤ ' + text
    if quant.MaxLength() == 1:
        text = text + ' ≤ ' + format_number(float(quant.Max(0)))

    return text if text != 'q' else None


def _equals_default(value, default):
    if callable(value):
        value = value()

    if isinstance(default, bool):
        return isinstance(value, (bool, int, float)) and bool(value) == default
    if isinstance(default, (int, float)):
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value == default
    if isinstance(default, str):
        if isinstance(value, (list, tuple)):
            return format_value(value) == default
        return isinstance(value, str) and value == default
    if isinstance(default, list):
        return isinstance(value, (list, tuple)) and list(value) == default
    return False


def _make_attribute(operator, name, value, metadata):
    schema = metadata.get_attribute_schema(operator, name)
    if schema is None:
        return Attribute(name, value)

    type = schema.get('type')
    if type is not None:
        value = substitute_enum_value_with_name(type, value)

    visible = True
    if schema.get('visible', True) is False:
        visible = False
    elif 'default' in schema and _equals_default(value, schema['default']):
        visible = False

    return Attribute(name, value, type, visible)


def _enumerate_attributes(options_class, options):
    for field in options_class.fields():
        if field.length_getter is not None:
            value = [field.getter(options, i) for i in range(field.length_getter(options))]
        else:
            value = field.getter(options)
        yield camel_to_snake(field.name), value


def _decode_custom_options(bytes):
    try:
        root = flexbuffers.GetRoot(bytes)
        if not root.IsMap:
            logging.log(LOGGING_LEVEL, "Custom options are not a flexbuffers map")
            return {}
        items = root.AsMap.Value
    except (ValueError, IndexError, KeyError, struct.error) as e:
        logging.log(LOGGING_LEVEL, "Could not decode custom options: {}".format(e))
        return {}
    return {key: value for key, value in items.items() if not key.startswith('_')}


def _build_attributes(operator, name, custom, metadata):
    if custom:
        if operator.CustomOptionsLength() == 0 or \
                operator.CustomOptionsFormat() != fb.CustomOptionsFormat.FLEXBUFFERS:
            return []
        attribs = _decode_custom_options(operator.CustomOptionsAsNumpy().tobytes())
        return [_make_attribute(name, key, value, metadata) for key, value in attribs.items()]

    options_class = OptionsClassByOperator.get(name)
    if options_class is None:
        return []

    options = options_class()
    table = operator.BuiltinOptions()
    if table is not None:
        options.Init(table.Bytes, table.Pos)

    return [_make_attribute(name, key, value, metadata) for key, value in _enumerate_attributes(options_class, options)]


def _build_node(graph, operator, name, custom, metadata):
    arena = graph.connections

    def _resolve(keys):
        valid = []
        for key in keys:
            if 0 <= key < len(arena):
                valid.append(key)
            else:
                logging.log(LOGGING_LEVEL, "Operator '{}' refers to missing tensor {}".format(name, key))
        return valid

    raw_inputs = [operator.Inputs(i) for i in range(operator.InputsLength())]
    inputs = [Argument(graph, mapped.name, mapped.visible, _resolve(mapped.connections))
              for mapped in metadata.get_inputs(raw_inputs, name)]

    outputs = []
    for i in range(operator.OutputsLength()):
        key = operator.Outputs(i)
        outputs.append(Argument(graph, metadata.get_output_name(name, i), True,
                                _resolve([key] if key != NO_CONNECTION else [])))

    attributes = _build_attributes(operator, name, custom, metadata)

    return Node(graph, name, inputs=inputs, outputs=outputs, attributes=attributes,
                category=metadata.get_category(name), custom=custom)


def _build_connection(graph, fbmodel, tensor, index):
    name = decode_string(tensor.Name())
    type = TensorType(tensor_type(tensor), TensorShape(tensor_shape(tensor)))
    quantization = _get_quantization_text(tensor)
    id = name if name else str(index)

    buffer_index = tensor.Buffer()
    data = None
    if buffer_index < fbmodel.BuffersLength():
        buffer = fbmodel.Buffers(buffer_index)
        if buffer is not None and buffer.DataLength() > 0:
            data = buffer.DataAsNumpy().tobytes()
    else:
        logging.log(LOGGING_LEVEL, "Tensor '{}' refers to missing buffer {}".format(id, buffer_index))

    if data is not None:
        return Connection(graph, id, initializer=Initializer(index, name, type, data), quantization=quantization)
    else:
        return Connection(graph, id, type=type, quantization=quantization)


def _build_graph_arguments(graph, keys):
    arena = graph.connections
    arguments = []
    for key in keys:
        if 0 <= key < len(arena):
            arguments.append(Argument(graph, arena[key].id, True, [key]))
        else:
            logging.log(LOGGING_LEVEL, "Graph '{}' refers to missing tensor {}".format(graph.name, key))
    return arguments


def _build_graph(model, fbmodel, subgraph, name, operator_codes, metadata):
    graph = Graph(model, name)

    for i in range(subgraph.TensorsLength()):
        _build_connection(graph, fbmodel, subgraph.Tensors(i), i)

    for i in range(subgraph.OperatorsLength()):
        operator = subgraph.Operators(i)
        opcode_index = operator.OpcodeIndex()
        if opcode_index < len(operator_codes):
            op_name, custom = operator_codes[opcode_index]
        else:
            logging.log(LOGGING_LEVEL, "Operator code index {} out of range".format(opcode_index))
            op_name, custom = positional_name(opcode_index), False
        _build_node(graph, operator, op_name, custom, metadata)

    graph._set_io(_build_graph_arguments(graph, [subgraph.Inputs(i) for i in range(subgraph.InputsLength())]),
                  _build_graph_arguments(graph, [subgraph.Outputs(i) for i in range(subgraph.OutputsLength())]))

    return graph


def _build_operator_codes(fbmodel):
    codes = []
    for i in range(fbmodel.OperatorCodesLength()):
        operator_code = fbmodel.OperatorCodes(i)
        builtin_code = operator_code.BuiltinCode()
        custom = builtin_code == fb.BuiltinOperator.CUSTOM
        name = operator_name(builtin_code, operator_code.CustomCode())
        codes.append((name if name else positional_name(i), custom))
    return codes


def _build_model(fbmodel, metadata):
    version = fbmodel.Version()
    model = Model(format='TensorFlow Lite v' + str(version),
                  version='version ' + str(version),
                  description=decode_string(fbmodel.Description()))

    operator_codes = _build_operator_codes(fbmodel)

    count = fbmodel.SubgraphsLength()
    for i in range(count):
        subgraph = fbmodel.Subgraphs(i)
        name = decode_string(subgraph.Name())
        if not name:
            name = positional_name(i) if count > 1 else ''
        _build_graph(model, fbmodel, subgraph, name, operator_codes, metadata)

    return model


def read_model(data, metadata=None, source=None):
    """
    Builds the logical graph model of a TensorFlow Lite flatbuffer held in memory.

    Raises TFLiteFormatError if the buffer does not carry the 'TFL3' identifier or its
    structure cannot be read. Operator schemas come from the given OperatorMetadata,
    or from the bundled catalog when none is given.
    """
    source = source if source is not None else '<buffer>'
    data = bytearray(data)

    if len(data) < 8 or not fb.Model.ModelBufferHasIdentifier(data, 0):
        raise TFLiteFormatError("Invalid FlatBuffers identifier '{}' in '{}'."
                                .format(_printable_identifier(data), source))

    if metadata is None:
        metadata = OperatorMetadata.default()

    try:
        return _build_model(fb.Model.GetRootAsModel(data, 0), metadata)
    except (struct.error, IndexError, ValueError) as e:
        raise TFLiteFormatError("Invalid TensorFlow Lite model structure in '{}'.".format(source),
                                details=[str(e)]) from e


def read_flatbuffers(filename, metadata=None):
    with open(filename, 'rb') as file:
        data = file.read()

    return read_model(data, metadata, source=filename)


class Reader(object):

    def __init__(self, metadata=None):
        self._metadata = metadata

    def __call__(self, filename):
        if self._metadata is None:
            self._metadata = OperatorMetadata.default()
        return read_flatbuffers(filename, self._metadata)
