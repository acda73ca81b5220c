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

import flatbuffers
import numpy as np

from tflite_graph.io.lite import flatbuffers as fb


class _Subgraph:

    def __init__(self, name):
        self.name = name
        self.tensors = []
        self.operators = []
        self.inputs = []
        self.outputs = []

    def add_tensor(self, name, shape, type=fb.TensorType.FLOAT32, buffer=0, quantization=None):
        self.tensors.append(dict(name=name, shape=shape, type=type, buffer=buffer, quantization=quantization))
        return len(self.tensors) - 1

    def add_operator(self, opcode_index, inputs, outputs, options=None, custom_options=None):
        """
        options is a pair of an options class and a dict of its (camelCase) field values
        """
        self.operators.append(dict(opcode_index=opcode_index, inputs=inputs, outputs=outputs,
                                   options=options, custom_options=custom_options))


class TFLiteBuilder:
    """
    Assembles small TensorFlow Lite flatbuffers for tests.
    """

    def __init__(self, version=3, description=None):
        self.version = version
        self.description = description
        self.buffers = [b'']
        self.operator_codes = []
        self.subgraphs = []

    def add_buffer(self, data):
        self.buffers.append(bytes(data))
        return len(self.buffers) - 1

    def add_operator_code(self, builtin_code, custom_code=None):
        self.operator_codes.append((builtin_code, custom_code))
        return len(self.operator_codes) - 1

    def add_subgraph(self, name=None):
        subgraph = _Subgraph(name)
        self.subgraphs.append(subgraph)
        return subgraph

    def build(self, file_identifier=b'TFL3'):
        builder = flatbuffers.Builder(1024)

        buffers = [self._build_buffer(builder, data) for data in self.buffers]
        operator_codes = [self._build_operator_code(builder, *code) for code in self.operator_codes]
        subgraphs = [self._build_subgraph(builder, subgraph) for subgraph in self.subgraphs]
        description = builder.CreateString(self.description) if self.description is not None else None

        buffers_vector = _offset_vector(builder, buffers)
        codes_vector = _offset_vector(builder, operator_codes)
        subgraphs_vector = _offset_vector(builder, subgraphs)

        builder.StartObject(5)
        builder.PrependUint32Slot(0, self.version, 0)
        builder.PrependUOffsetTRelativeSlot(1, codes_vector, 0)
        builder.PrependUOffsetTRelativeSlot(2, subgraphs_vector, 0)
        if description is not None:
            builder.PrependUOffsetTRelativeSlot(3, description, 0)
        builder.PrependUOffsetTRelativeSlot(4, buffers_vector, 0)
        model = builder.EndObject()

        builder.Finish(model, file_identifier=file_identifier)
        return bytes(builder.Output())

    @staticmethod
    def _build_buffer(builder, data):
        vector = builder.CreateNumpyVector(np.frombuffer(data, dtype=np.uint8)) if len(data) else None
        builder.StartObject(1)
        if vector is not None:
            builder.PrependUOffsetTRelativeSlot(0, vector, 0)
        return builder.EndObject()

    @staticmethod
    def _build_operator_code(builder, builtin_code, custom_code):
        custom = builder.CreateString(custom_code) if custom_code is not None else None
        builder.StartObject(4)
        builder.PrependInt8Slot(0, min(builtin_code, 127), 0)
        if custom is not None:
            builder.PrependUOffsetTRelativeSlot(1, custom, 0)
        builder.PrependInt32Slot(2, 1, 1)
        builder.PrependInt32Slot(3, builtin_code, 0)
        return builder.EndObject()

    @staticmethod
    def _build_quantization(builder, quantization):
        vectors = {}
        for slot, key, dtype in [(0, 'min', np.float32), (1, 'max', np.float32),
                                 (2, 'scale', np.float32), (3, 'zero_point', np.int64)]:
            if key in quantization:
                vectors[slot] = builder.CreateNumpyVector(np.array(quantization[key], dtype=dtype))

        builder.StartObject(7)
        for slot, vector in vectors.items():
            builder.PrependUOffsetTRelativeSlot(slot, vector, 0)
        return builder.EndObject()

    def _build_tensor(self, builder, tensor):
        shape = builder.CreateNumpyVector(np.array(tensor['shape'], dtype=np.int32))
        name = builder.CreateString(tensor['name']) if tensor['name'] is not None else None
        quantization = self._build_quantization(builder, tensor['quantization']) \
            if tensor['quantization'] is not None else None

        builder.StartObject(6)
        builder.PrependUOffsetTRelativeSlot(0, shape, 0)
        builder.PrependInt8Slot(1, tensor['type'], 0)
        builder.PrependUint32Slot(2, tensor['buffer'], 0)
        if name is not None:
            builder.PrependUOffsetTRelativeSlot(3, name, 0)
        if quantization is not None:
            builder.PrependUOffsetTRelativeSlot(4, quantization, 0)
        return builder.EndObject()

    @staticmethod
    def _build_options(builder, options_class, values):
        vectors = {}
        for index, field in enumerate(options_class.FIELDS):
            if field.vector and field.name in values:
                vectors[index] = builder.CreateNumpyVector(np.array(values[field.name], dtype=np.int32))

        builder.StartObject(len(options_class.FIELDS))
        for index, field in enumerate(options_class.FIELDS):
            if index in vectors:
                builder.PrependUOffsetTRelativeSlot(index, vectors[index], 0)
            elif field.name in values:
                builder.PrependSlot(field.flags, index, values[field.name], field.default)
        return builder.EndObject()

    def _build_operator(self, builder, operator):
        inputs = builder.CreateNumpyVector(np.array(operator['inputs'], dtype=np.int32))
        outputs = builder.CreateNumpyVector(np.array(operator['outputs'], dtype=np.int32))
        options = self._build_options(builder, *operator['options']) if operator['options'] is not None else None
        custom = builder.CreateNumpyVector(np.frombuffer(bytes(operator['custom_options']), dtype=np.uint8)) \
            if operator['custom_options'] is not None else None

        builder.StartObject(7)
        builder.PrependUint32Slot(0, operator['opcode_index'], 0)
        builder.PrependUOffsetTRelativeSlot(1, inputs, 0)
        builder.PrependUOffsetTRelativeSlot(2, outputs, 0)
        if options is not None:
            builder.PrependUint8Slot(3, 1, 0)
            builder.PrependUOffsetTRelativeSlot(4, options, 0)
        if custom is not None:
            builder.PrependUOffsetTRelativeSlot(5, custom, 0)
        return builder.EndObject()

    def _build_subgraph(self, builder, subgraph):
        tensors = [self._build_tensor(builder, tensor) for tensor in subgraph.tensors]
        operators = [self._build_operator(builder, operator) for operator in subgraph.operators]
        name = builder.CreateString(subgraph.name) if subgraph.name is not None else None

        tensors_vector = _offset_vector(builder, tensors)
        operators_vector = _offset_vector(builder, operators)
        inputs = builder.CreateNumpyVector(np.array(subgraph.inputs, dtype=np.int32))
        outputs = builder.CreateNumpyVector(np.array(subgraph.outputs, dtype=np.int32))

        builder.StartObject(5)
        builder.PrependUOffsetTRelativeSlot(0, tensors_vector, 0)
        builder.PrependUOffsetTRelativeSlot(1, inputs, 0)
        builder.PrependUOffsetTRelativeSlot(2, outputs, 0)
        builder.PrependUOffsetTRelativeSlot(3, operators_vector, 0)
        if name is not None:
            builder.PrependUOffsetTRelativeSlot(4, name, 0)
        return builder.EndObject()


def _offset_vector(builder, offsets):
    builder.StartVector(4, len(offsets), 4)
    for offset in reversed(offsets):
        builder.PrependUOffsetTRelative(offset)
    return builder.EndVector()
