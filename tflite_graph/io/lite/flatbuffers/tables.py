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

from flatbuffers import encode, packer, util
from flatbuffers import number_types as N
from flatbuffers.table import Table


FILE_IDENTIFIER = b"TFL3"


def _slot(index):
    return 4 + 2 * index


class _Record(object):
    __slots__ = ['_tab']

    def Init(self, buf, pos):
        self._tab = Table(buf, pos)

    def _offset(self, index):
        return N.UOffsetTFlags.py_type(self._tab.Offset(_slot(index)))

    def _scalar(self, index, flags, default):
        o = self._offset(index)
        if o != 0:
            return self._tab.Get(flags, o + self._tab.Pos)
        return default

    def _string(self, index):
        o = self._offset(index)
        if o != 0:
            return self._tab.String(o + self._tab.Pos)
        return None

    def _length(self, index):
        o = self._offset(index)
        if o != 0:
            return self._tab.VectorLen(o)
        return 0

    def _item(self, index, flags, j):
        o = self._offset(index)
        if o != 0:
            a = self._tab.Vector(o)
            return self._tab.Get(flags, a + N.UOffsetTFlags.py_type(j * flags.bytewidth))
        return 0

    def _numpy(self, index, flags):
        o = self._offset(index)
        if o != 0:
            return self._tab.GetVectorAsNumpy(flags, o)
        return 0

    def _table(self, index, cls):
        o = self._offset(index)
        if o != 0:
            x = self._tab.Indirect(o + self._tab.Pos)
            obj = cls()
            obj.Init(self._tab.Bytes, x)
            return obj
        return None

    def _table_item(self, index, cls, j):
        o = self._offset(index)
        if o != 0:
            x = self._tab.Vector(o)
            x += N.UOffsetTFlags.py_type(j) * 4
            x = self._tab.Indirect(x)
            obj = cls()
            obj.Init(self._tab.Bytes, x)
            return obj
        return None

    def _union(self, index):
        o = self._offset(index)
        if o != 0:
            obj = Table(bytearray(), 0)
            self._tab.Union(obj, o)
            return obj
        return None


class Buffer(_Record):

    def Data(self, j):
        return self._item(0, N.Uint8Flags, j)

    def DataAsNumpy(self):
        return self._numpy(0, N.Uint8Flags)

    def DataLength(self):
        return self._length(0)


class QuantizationParameters(_Record):

    def Min(self, j):
        return self._item(0, N.Float32Flags, j)

    def MinLength(self):
        return self._length(0)

    def Max(self, j):
        return self._item(1, N.Float32Flags, j)

    def MaxLength(self):
        return self._length(1)

    def Scale(self, j):
        return self._item(2, N.Float32Flags, j)

    def ScaleLength(self):
        return self._length(2)

    def ZeroPoint(self, j):
        return self._item(3, N.Int64Flags, j)

    def ZeroPointLength(self):
        return self._length(3)

    def QuantizedDimension(self):
        return self._scalar(6, N.Int32Flags, 0)


class Tensor(_Record):

    def Shape(self, j):
        return self._item(0, N.Int32Flags, j)

    def ShapeLength(self):
        return self._length(0)

    def Type(self):
        return self._scalar(1, N.Int8Flags, 0)

    def Buffer(self):
        return self._scalar(2, N.Uint32Flags, 0)

    def Name(self):
        return self._string(3)

    def Quantization(self):
        return self._table(4, QuantizationParameters)

    def IsVariable(self):
        return bool(self._scalar(5, N.BoolFlags, False))


class OperatorCode(_Record):

    def DeprecatedBuiltinCode(self):
        return self._scalar(0, N.Int8Flags, 0)

    def CustomCode(self):
        return self._string(1)

    def Version(self):
        return self._scalar(2, N.Int32Flags, 1)

    def BuiltinCode(self):
        # newer writers use the int32 field, older ones only the deprecated byte
        return max(self._scalar(3, N.Int32Flags, 0), self.DeprecatedBuiltinCode())


class Operator(_Record):

    def OpcodeIndex(self):
        return self._scalar(0, N.Uint32Flags, 0)

    def Inputs(self, j):
        return self._item(1, N.Int32Flags, j)

    def InputsLength(self):
        return self._length(1)

    def Outputs(self, j):
        return self._item(2, N.Int32Flags, j)

    def OutputsLength(self):
        return self._length(2)

    def BuiltinOptionsType(self):
        return self._scalar(3, N.Uint8Flags, 0)

    def BuiltinOptions(self):
        return self._union(4)

    def CustomOptions(self, j):
        return self._item(5, N.Uint8Flags, j)

    def CustomOptionsAsNumpy(self):
        return self._numpy(5, N.Uint8Flags)

    def CustomOptionsLength(self):
        return self._length(5)

    def CustomOptionsFormat(self):
        return self._scalar(6, N.Int8Flags, 0)


class SubGraph(_Record):

    def Tensors(self, j):
        return self._table_item(0, Tensor, j)

    def TensorsLength(self):
        return self._length(0)

    def Inputs(self, j):
        return self._item(1, N.Int32Flags, j)

    def InputsLength(self):
        return self._length(1)

    def Outputs(self, j):
        return self._item(2, N.Int32Flags, j)

    def OutputsLength(self):
        return self._length(2)

    def Operators(self, j):
        return self._table_item(3, Operator, j)

    def OperatorsLength(self):
        return self._length(3)

    def Name(self):
        return self._string(4)


class Model(_Record):

    @classmethod
    def GetRootAsModel(cls, buf, offset=0):
        n = encode.Get(packer.uoffset, buf, offset)
        x = cls()
        x.Init(buf, n + offset)
        return x

    @classmethod
    def ModelBufferHasIdentifier(cls, buf, offset=0):
        return util.BufferHasIdentifier(buf, offset, FILE_IDENTIFIER, size_prefixed=False)

    def Version(self):
        return self._scalar(0, N.Uint32Flags, 0)

    def OperatorCodes(self, j):
        return self._table_item(1, OperatorCode, j)

    def OperatorCodesLength(self):
        return self._length(1)

    def Subgraphs(self, j):
        return self._table_item(2, SubGraph, j)

    def SubgraphsLength(self):
        return self._length(2)

    def Description(self):
        return self._string(3)

    def Buffers(self, j):
        return self._table_item(4, Buffer, j)

    def BuffersLength(self):
        return self._length(4)
