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

from functools import reduce
import numpy as np
import typing
import sys


EMPTY_STATE = 'Tensor data is empty.'
SHORT_STATE = 'Tensor data is too short.'
INVALID_STATE = 'Tensor data is invalid.'

TRUNCATION_MARKER = '...'

UNBOUNDED_LIMIT = sys.maxsize
PREVIEW_LIMIT = 10000

# little-endian layouts of the fixed width types; anything else is not decoded
_NumpyDtypes = {
    'uint8': np.dtype('<u1'),
    'int8': np.dtype('<i1'),
    'bool': np.dtype('?'),
    'int16': np.dtype('<i2'),
    'float16': np.dtype('<f2'),
    'int32': np.dtype('<i4'),
    'float32': np.dtype('<f4'),
    'int64': np.dtype('<i8'),
    'float64': np.dtype('<f8'),
}


class _Context(object):

    def __init__(self, data_type, dimensions):
        self.state = None
        self.data_type = data_type
        self.dimensions = dimensions
        self.data = None
        self.index = 0
        self.count = 0
        self.limit = UNBOUNDED_LIMIT


def _volume(dimensions):
    return reduce(lambda x, y: x * y, dimensions, 1)


def _string_table(data):
    if len(data) < 4:
        return None

    count = int(np.frombuffer(data, dtype='<i4', count=1)[0])
    if count < 0 or 4 * (count + 1) > len(data):
        return None

    offsets = np.frombuffer(data, dtype='<i4', count=count, offset=4).tolist()
    offsets.append(len(data))

    strings = []
    for k in range(count):
        start, end = offsets[k], offsets[k + 1]
        if not 0 <= start <= end <= len(data):
            return None
        text = bytes(data[start:end])
        try:
            strings.append(text.decode('utf-8'))
        except UnicodeDecodeError:
            strings.append(text.decode('latin-1'))
    return strings


def context(data, data_type, dimensions):
    # type: (typing.Optional[bytes], str, typing.Tuple[int, ...])->_Context
    ctx = _Context(data_type, tuple(dimensions))

    if data is None or len(data) == 0:
        ctx.state = EMPTY_STATE
        return ctx

    if any(d < 0 for d in ctx.dimensions):
        ctx.state = INVALID_STATE
        return ctx

    volume = _volume(ctx.dimensions)

    if data_type == 'string':
        strings = _string_table(data)
        if strings is None:
            ctx.state = INVALID_STATE
        elif len(strings) < volume:
            ctx.state = SHORT_STATE
        else:
            ctx.data = strings
    elif data_type in _NumpyDtypes:
        dtype = _NumpyDtypes[data_type]
        if volume * dtype.itemsize > len(data):
            ctx.state = SHORT_STATE
        elif volume == 0:
            ctx.data = np.empty((0,), dtype=dtype)
        else:
            ctx.data = np.frombuffer(data, dtype=dtype, count=volume)

    return ctx


def _item(ctx):
    value = ctx.data[ctx.index]
    ctx.index += 1
    ctx.count += 1
    return value.item() if isinstance(value, np.generic) else value


def _decode(ctx, dimension):
    size = ctx.dimensions[dimension]
    results = []
    if dimension == len(ctx.dimensions) - 1:
        if ctx.data is None:
            return results
        for _ in range(size):
            if ctx.count >= ctx.limit:
                results.append(TRUNCATION_MARKER)
                return results
            results.append(_item(ctx))
    else:
        for _ in range(size):
            if ctx.count >= ctx.limit:
                results.append(TRUNCATION_MARKER)
                return results
            results.append(_decode(ctx, dimension + 1))
    return results


def decode(data, data_type, dimensions, limit=UNBOUNDED_LIMIT):
    """
    Decodes raw little-endian tensor data into nested lists following the given dimensions.

    At most 'limit' leaf elements are produced; the level where the limit is hit ends with
    a single '...' marker. If the data cannot be decoded, the textual state is returned
    instead (e.g. 'Tensor data is empty.'). An empty dimension list yields a scalar.
    Data types without a known layout produce no leaf elements.
    """
    ctx = context(data, data_type, dimensions)
    if ctx.state is not None:
        return ctx.state

    return values(ctx, limit)


def values(ctx, limit=UNBOUNDED_LIMIT):
    # type: (_Context, int)->typing.Any
    assert ctx.state is None

    ctx.index = 0
    ctx.count = 0
    ctx.limit = limit

    if len(ctx.dimensions) == 0:
        return _item(ctx) if ctx.data is not None else None

    return _decode(ctx, 0)


def state(data, data_type, dimensions):
    return context(data, data_type, dimensions).state
