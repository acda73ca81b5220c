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

import struct
import unittest

import numpy as np

from tflite_graph.model import decoder


def _string_tensor(*strings):
    encoded = [s.encode('utf-8') if isinstance(s, str) else s for s in strings]
    header = 4 + 4 * len(encoded)
    offsets = []
    position = header
    for item in encoded:
        offsets.append(position)
        position += len(item)
    return struct.pack('<i', len(encoded)) + struct.pack('<{}i'.format(len(offsets)), *offsets) + b''.join(encoded)


class DecoderTestCases(unittest.TestCase):

    def test_float32_matrix(self):
        data = np.array([[0.5, 1.0, 1.5], [2.0, 2.5, 3.0]], dtype='<f4').tobytes()
        self.assertEqual(decoder.decode(data, 'float32', (2, 3)), [[0.5, 1.0, 1.5], [2.0, 2.5, 3.0]])

    def test_fixed_width_types(self):
        cases = [
            ('uint8', np.array([0, 255], dtype=np.uint8), [0, 255]),
            ('int8', np.array([-1, 2], dtype=np.int8), [-1, 2]),
            ('bool', np.array([True, False], dtype=np.bool_), [True, False]),
            ('int16', np.array([-300, 300], dtype='<i2'), [-300, 300]),
            ('float16', np.array([0.5, -2.0], dtype='<f2'), [0.5, -2.0]),
            ('int32', np.array([-70000, 70000], dtype='<i4'), [-70000, 70000]),
            ('int64', np.array([-2 ** 40, 2 ** 40], dtype='<i8'), [-2 ** 40, 2 ** 40]),
            ('float64', np.array([0.1, 0.2], dtype='<f8'), [0.1, 0.2]),
        ]
        for data_type, array, expected in cases:
            self.assertEqual(decoder.decode(array.tobytes(), data_type, (2,)), expected, data_type)

    def test_empty_data(self):
        self.assertEqual(decoder.decode(b'', 'float32', (2,)), decoder.EMPTY_STATE)
        self.assertEqual(decoder.decode(None, 'float32', (2,)), decoder.EMPTY_STATE)

    def test_short_data(self):
        data = np.array([1.0, 2.0], dtype='<f4').tobytes()
        self.assertEqual(decoder.decode(data, 'float32', (4,)), decoder.SHORT_STATE)
        self.assertEqual(decoder.state(data, 'float32', (4,)), decoder.SHORT_STATE)

    def test_negative_dimension(self):
        data = np.array([1, 2], dtype='<i4').tobytes()
        self.assertEqual(decoder.decode(data, 'int32', (-1,)), decoder.INVALID_STATE)

    def test_scalar(self):
        data = np.array([7], dtype='<i4').tobytes()
        self.assertEqual(decoder.decode(data, 'int32', ()), 7)

    def test_unknown_type_emits_nothing(self):
        self.assertEqual(decoder.decode(b'\x00' * 16, 'complex64', (2,)), [])
        self.assertEqual(decoder.decode(b'\x00' * 16, '?', (2, 2)), [[], []])

    def test_strings(self):
        data = _string_tensor('abc', 'de')
        self.assertEqual(decoder.decode(data, 'string', (2,)), ['abc', 'de'])

    def test_strings_fallback_to_latin1(self):
        data = _string_tensor(b'\xff\xfe')
        self.assertEqual(decoder.decode(data, 'string', (1,)), ['\xff\xfe'])

    def test_strings_with_bad_offsets(self):
        data = struct.pack('<iii', 2, 100, 4)
        self.assertEqual(decoder.decode(data, 'string', (2,)), decoder.INVALID_STATE)

    def test_strings_with_bad_count(self):
        data = struct.pack('<ii', 5, 8)
        self.assertEqual(decoder.decode(data, 'string', (5,)), decoder.INVALID_STATE)

    def test_strings_too_few(self):
        data = _string_tensor('a')
        self.assertEqual(decoder.decode(data, 'string', (3,)), decoder.SHORT_STATE)

    def test_cutoff_inside_row(self):
        data = np.arange(6, dtype='<i4').tobytes()
        self.assertEqual(decoder.decode(data, 'int32', (2, 3), limit=4), [[0, 1, 2], [3, '...']])

    def test_cutoff_between_rows(self):
        data = np.arange(6, dtype='<i4').tobytes()
        self.assertEqual(decoder.decode(data, 'int32', (2, 3), limit=3), [[0, 1, 2], '...'])

    def test_cutoff_bounds_leaf_count(self):
        data = np.arange(24, dtype='<i4').tobytes()
        for limit in range(0, 25):
            value = decoder.decode(data, 'int32', (2, 3, 4), limit=limit)
            leaves = _count_leaves(value)
            self.assertLessEqual(leaves, limit)
            if limit < 24:
                self.assertIn('...', _flatten(value))

    def test_fresh_cutoff_per_call(self):
        data = np.arange(4, dtype='<i4').tobytes()
        self.assertEqual(decoder.decode(data, 'int32', (4,), limit=2), [0, 1, '...'])
        self.assertEqual(decoder.decode(data, 'int32', (4,)), [0, 1, 2, 3])

    def test_zero_volume(self):
        data = b'\x00' * 4
        self.assertEqual(decoder.decode(data, 'float32', (0,)), [])
        self.assertEqual(decoder.decode(data, 'float32', (2, 0)), [[], []])


def _flatten(value):
    if isinstance(value, list):
        return [leaf for item in value for leaf in _flatten(item)]
    return [value]


def _count_leaves(value):
    return sum(1 for leaf in _flatten(value) if leaf != '...')


if __name__ == '__main__':
    unittest.main()
