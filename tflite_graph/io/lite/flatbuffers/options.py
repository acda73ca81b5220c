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

from collections import namedtuple
from flatbuffers import number_types as N
from flatbuffers.table import Table


# An options table is described by an ordered list of fields; the position in
# the list is the flatbuffers field id. Vector fields get an array partner
# (a length getter) when enumerated.
Field = namedtuple('Field', ['name', 'flags', 'default', 'vector'])


def _field(name, flags, default=0):
    return Field(name, flags, default, False)


def _vector(name, flags):
    return Field(name, flags, None, True)


OptionsField = namedtuple('OptionsField', ['name', 'getter', 'length_getter'])


class BuiltinOptionsTable(object):
    __slots__ = ['_tab']

    FIELDS = ()

    def __init__(self):
        self._tab = None

    def Init(self, buf, pos):
        self._tab = Table(buf, pos)

    def _offset(self, index):
        if self._tab is None:
            return 0
        return N.UOffsetTFlags.py_type(self._tab.Offset(4 + 2 * index))

    def Get(self, index):
        field = self.FIELDS[index]
        o = self._offset(index)
        if o != 0:
            return self._tab.Get(field.flags, o + self._tab.Pos)
        return field.default

    def GetItem(self, index, j):
        field = self.FIELDS[index]
        o = self._offset(index)
        if o != 0:
            a = self._tab.Vector(o)
            return self._tab.Get(field.flags, a + N.UOffsetTFlags.py_type(j * field.flags.bytewidth))
        return 0

    def GetLength(self, index):
        o = self._offset(index)
        if o != 0:
            return self._tab.VectorLen(o)
        return 0

    @classmethod
    def fields(cls):
        """
        Lists the readable fields of this options table in declaration order.

        Scalar fields come with a getter taking the options object; vector fields come
        with an item getter (options, index) and a length getter (options) as partner.
        """
        return [OptionsField(field.name,
                             _item_getter(index) if field.vector else _scalar_getter(index),
                             _length_getter(index) if field.vector else None)
                for index, field in enumerate(cls.FIELDS)]


def _scalar_getter(index):
    return lambda options: options.Get(index)


def _item_getter(index):
    return lambda options, j: options.GetItem(index, j)


def _length_getter(index):
    return lambda options: options.GetLength(index)


class Conv2DOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('padding', N.Int8Flags),
        _field('strideW', N.Int32Flags),
        _field('strideH', N.Int32Flags),
        _field('fusedActivationFunction', N.Int8Flags),
        _field('dilationWFactor', N.Int32Flags, 1),
        _field('dilationHFactor', N.Int32Flags, 1),
    )


class Pool2DOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('padding', N.Int8Flags),
        _field('strideW', N.Int32Flags),
        _field('strideH', N.Int32Flags),
        _field('filterWidth', N.Int32Flags),
        _field('filterHeight', N.Int32Flags),
        _field('fusedActivationFunction', N.Int8Flags),
    )


class DepthwiseConv2DOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('padding', N.Int8Flags),
        _field('strideW', N.Int32Flags),
        _field('strideH', N.Int32Flags),
        _field('depthMultiplier', N.Int32Flags),
        _field('fusedActivationFunction', N.Int8Flags),
        _field('dilationWFactor', N.Int32Flags, 1),
        _field('dilationHFactor', N.Int32Flags, 1),
    )


class ConcatEmbeddingsOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('numChannels', N.Int32Flags),
        _vector('numColumnsPerChannel', N.Int32Flags),
        _vector('embeddingDimPerChannel', N.Int32Flags),
    )


class LSHProjectionOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('type', N.Int8Flags),
    )


class SVDFOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('rank', N.Int32Flags),
        _field('fusedActivationFunction', N.Int8Flags),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class RNNOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class SequenceRNNOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('timeMajor', N.BoolFlags, False),
        _field('fusedActivationFunction', N.Int8Flags),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class BidirectionalSequenceRNNOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('timeMajor', N.BoolFlags, False),
        _field('fusedActivationFunction', N.Int8Flags),
        _field('mergeOutputs', N.BoolFlags, False),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class FullyConnectedOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
        _field('weightsFormat', N.Int8Flags),
        _field('keepNumDims', N.BoolFlags, False),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class SoftmaxOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('beta', N.Float32Flags, 0.0),
    )


class ConcatenationOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('axis', N.Int32Flags),
        _field('fusedActivationFunction', N.Int8Flags),
    )


class AddOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
        _field('potScaleInt16', N.BoolFlags, True),
    )


class SubOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
        _field('potScaleInt16', N.BoolFlags, True),
    )


class MulOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
    )


class DivOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
    )


class L2NormOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
    )


class LocalResponseNormalizationOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('radius', N.Int32Flags),
        _field('bias', N.Float32Flags, 0.0),
        _field('alpha', N.Float32Flags, 0.0),
        _field('beta', N.Float32Flags, 0.0),
    )


class LSTMOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
        _field('cellClip', N.Float32Flags, 0.0),
        _field('projClip', N.Float32Flags, 0.0),
        _field('kernelType', N.Int8Flags),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class UnidirectionalSequenceLSTMOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
        _field('cellClip', N.Float32Flags, 0.0),
        _field('projClip', N.Float32Flags, 0.0),
        _field('timeMajor', N.BoolFlags, False),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class BidirectionalSequenceLSTMOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('fusedActivationFunction', N.Int8Flags),
        _field('cellClip', N.Float32Flags, 0.0),
        _field('projClip', N.Float32Flags, 0.0),
        _field('mergeOutputs', N.BoolFlags, False),
        _field('timeMajor', N.BoolFlags, True),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )


class ResizeBilinearOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('newHeight', N.Int32Flags),
        _field('newWidth', N.Int32Flags),
        _field('alignCorners', N.BoolFlags, False),
        _field('halfPixelCenters', N.BoolFlags, False),
    )


class ResizeNearestNeighborOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('alignCorners', N.BoolFlags, False),
        _field('halfPixelCenters', N.BoolFlags, False),
    )


class CallOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('subgraph', N.Uint32Flags),
    )


class ReshapeOptions(BuiltinOptionsTable):
    FIELDS = (
        _vector('newShape', N.Int32Flags),
    )


class SkipGramOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('ngramSize', N.Int32Flags),
        _field('maxSkipSize', N.Int32Flags),
        _field('includeAllNgrams', N.BoolFlags, False),
    )


class SpaceToDepthOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('blockSize', N.Int32Flags),
    )


class DepthToSpaceOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('blockSize', N.Int32Flags),
    )


class EmbeddingLookupSparseOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('combiner', N.Int8Flags),
    )


class GatherOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('axis', N.Int32Flags),
        _field('batchDims', N.Int32Flags),
    )


class ReducerOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('keepDims', N.BoolFlags, False),
    )


class SqueezeOptions(BuiltinOptionsTable):
    FIELDS = (
        _vector('squeezeDims', N.Int32Flags),
    )


class SplitOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('numSplits', N.Int32Flags),
    )


class SplitVOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('numSplits', N.Int32Flags),
    )


class StridedSliceOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('beginMask', N.Int32Flags),
        _field('endMask', N.Int32Flags),
        _field('ellipsisMask', N.Int32Flags),
        _field('newAxisMask', N.Int32Flags),
        _field('shrinkAxisMask', N.Int32Flags),
    )


class CastOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('inDataType', N.Int8Flags),
        _field('outDataType', N.Int8Flags),
    )


class ArgMaxOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('outputType', N.Int8Flags),
    )


class ArgMinOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('outputType', N.Int8Flags),
    )


class TransposeConvOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('padding', N.Int8Flags),
        _field('strideW', N.Int32Flags),
        _field('strideH', N.Int32Flags),
    )


class ShapeOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('outType', N.Int8Flags),
    )


class FakeQuantOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('min', N.Float32Flags, 0.0),
        _field('max', N.Float32Flags, 0.0),
        _field('numBits', N.Int32Flags),
        _field('narrowRange', N.BoolFlags, False),
    )


class PackOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('valuesCount', N.Int32Flags),
        _field('axis', N.Int32Flags),
    )


class UnpackOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('num', N.Int32Flags),
        _field('axis', N.Int32Flags),
    )


class OneHotOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('axis', N.Int32Flags),
    )


class LeakyReluOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('alpha', N.Float32Flags, 0.0),
    )


class MirrorPadOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('mode', N.Int8Flags),
    )


class UniqueOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('idxOutType', N.Int8Flags, 2),
    )


class ReverseSequenceOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('seqDim', N.Int32Flags),
        _field('batchDim', N.Int32Flags),
    )


class IfOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('thenSubgraphIndex', N.Int32Flags),
        _field('elseSubgraphIndex', N.Int32Flags),
    )


class WhileOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('condSubgraphIndex', N.Int32Flags),
        _field('bodySubgraphIndex', N.Int32Flags),
    )


class BatchMatMulOptions(BuiltinOptionsTable):
    FIELDS = (
        _field('adjX', N.BoolFlags, False),
        _field('adjY', N.BoolFlags, False),
        _field('asymmetricQuantizeInputs', N.BoolFlags, False),
    )
