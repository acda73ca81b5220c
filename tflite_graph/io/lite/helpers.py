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

from . import flatbuffers as fb
import logging
import re

# See: https://github.com/tensorflow/tensorflow/blob/master/tensorflow/lite/schema/schema.fbs


LOGGING_LEVEL = logging.DEBUG

UNKNOWN_DATA_TYPE = '?'

NO_CONNECTION = -1

_UpperCaseParts = {'2D', 'LSH', 'SVDF', 'RNN', 'L2', 'LSTM'}


def _generate_enum_value_by_name(enumClass):
    return {name: value for name, value in enumClass.__dict__.items() if not name.startswith('_')}


def _generate_enum_name_by_value(enumClass):
    return {value: name for name, value in enumClass.__dict__.items() if not name.startswith('_')}


def _format_operator_name(key):
    return ''.join(s if len(s) < 1 or s in _UpperCaseParts else s[:1] + s[1:].lower()
                   for s in key.split('_'))


DataTypeByValue = {value: name.lower() for value, name in _generate_enum_name_by_value(fb.TensorType).items()}

BuiltinOperatorTypeByValue = _generate_enum_name_by_value(fb.BuiltinOperator)

BuiltinOperatorNameByValue = {value: _format_operator_name(key) for value, key in BuiltinOperatorTypeByValue.items()}

EnumTypes = {
    'TensorType': fb.TensorType,
    'Padding': fb.Padding,
    'ActivationFunctionType': fb.ActivationFunctionType,
    'LSHProjectionType': fb.LSHProjectionType,
    'FullyConnectedOptionsWeightsFormat': fb.FullyConnectedOptionsWeightsFormat,
    'LSTMKernelType': fb.LSTMKernelType,
    'CombinerType': fb.CombinerType,
    'MirrorPadMode': fb.MirrorPadMode,
}

_EnumNameByValueMaps = {name: _generate_enum_name_by_value(cls) for name, cls in EnumTypes.items()}

OptionsClassByOperator = {
    'Add': fb.AddOptions,
    'ArgMax': fb.ArgMaxOptions,
    'ArgMin': fb.ArgMinOptions,
    'AveragePool2D': fb.Pool2DOptions,
    'BatchMatmul': fb.BatchMatMulOptions,
    'BidirectionalSequenceLSTM': fb.BidirectionalSequenceLSTMOptions,
    'BidirectionalSequenceRNN': fb.BidirectionalSequenceRNNOptions,
    'Call': fb.CallOptions,
    'Cast': fb.CastOptions,
    'ConcatEmbeddings': fb.ConcatEmbeddingsOptions,
    'Concatenation': fb.ConcatenationOptions,
    'Conv2D': fb.Conv2DOptions,
    'DepthToSpace': fb.DepthToSpaceOptions,
    'DepthwiseConv2D': fb.DepthwiseConv2DOptions,
    'Div': fb.DivOptions,
    'EmbeddingLookupSparse': fb.EmbeddingLookupSparseOptions,
    'FakeQuant': fb.FakeQuantOptions,
    'FullyConnected': fb.FullyConnectedOptions,
    'Gather': fb.GatherOptions,
    'If': fb.IfOptions,
    'L2Normalization': fb.L2NormOptions,
    'L2Pool2D': fb.Pool2DOptions,
    'LeakyRelu': fb.LeakyReluOptions,
    'LocalResponseNormalization': fb.LocalResponseNormalizationOptions,
    'LSHProjection': fb.LSHProjectionOptions,
    'LSTM': fb.LSTMOptions,
    'MaxPool2D': fb.Pool2DOptions,
    'Mean': fb.ReducerOptions,
    'MirrorPad': fb.MirrorPadOptions,
    'Mul': fb.MulOptions,
    'OneHot': fb.OneHotOptions,
    'Pack': fb.PackOptions,
    'ReduceAny': fb.ReducerOptions,
    'ReduceMax': fb.ReducerOptions,
    'ReduceMin': fb.ReducerOptions,
    'ReduceProd': fb.ReducerOptions,
    'Reshape': fb.ReshapeOptions,
    'ResizeBilinear': fb.ResizeBilinearOptions,
    'ResizeNearestNeighbor': fb.ResizeNearestNeighborOptions,
    'ReverseSequence': fb.ReverseSequenceOptions,
    'RNN': fb.RNNOptions,
    'Shape': fb.ShapeOptions,
    'SkipGram': fb.SkipGramOptions,
    'Softmax': fb.SoftmaxOptions,
    'SpaceToDepth': fb.SpaceToDepthOptions,
    'Split': fb.SplitOptions,
    'SplitV': fb.SplitVOptions,
    'Squeeze': fb.SqueezeOptions,
    'StridedSlice': fb.StridedSliceOptions,
    'Sub': fb.SubOptions,
    'Sum': fb.ReducerOptions,
    'SVDF': fb.SVDFOptions,
    'TransposeConv': fb.TransposeConvOptions,
    'UnidirectionalSequenceLSTM': fb.UnidirectionalSequenceLSTMOptions,
    'UnidirectionalSequenceRNN': fb.SequenceRNNOptions,
    'Unique': fb.UniqueOptions,
    'Unpack': fb.UnpackOptions,
    'While': fb.WhileOptions,
}


_regex1 = re.compile('(.)([A-Z][a-z]+)')
_regex2 = re.compile('([a-z0-9])([A-Z])')


def positional_name(index):
    return '(' + str(index) + ')'


def camel_to_snake(s):
    subbed = _regex1.sub(r'\1_\2', s)
    return _regex2.sub(r'\1_\2', subbed).lower()


def operator_name(builtin_code, custom_code=None):
    if builtin_code == fb.BuiltinOperator.CUSTOM:
        return decode_string(custom_code) if isinstance(custom_code, bytes) else custom_code
    name = BuiltinOperatorNameByValue.get(builtin_code)
    if name is None:
        logging.log(LOGGING_LEVEL, "Unknown builtin operator code {}".format(builtin_code))
        return positional_name(builtin_code)
    return name


def substitute_enum_value_with_name(type, value):
    map = _EnumNameByValueMaps.get(type)
    return map.get(value, value) if map is not None and isinstance(value, int) else value


def tensor_type(tensor):
    code = tensor.Type()
    data_type = DataTypeByValue.get(code)
    if data_type is None:
        logging.log(LOGGING_LEVEL, "Unknown tensor type code {}".format(code))
        return UNKNOWN_DATA_TYPE
    return data_type


def tensor_shape(tensor):
    length = tensor.ShapeLength()
    return tuple(int(tensor.Shape(i)) for i in range(length)) if length > 0 else ()


def decode_string(value):
    return value.decode('utf-8', errors='replace') if value is not None else None
