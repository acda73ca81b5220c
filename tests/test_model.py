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

import json
import unittest
from unittest import mock

import numpy as np

from tflite_graph.model import *
from tflite_graph.model import decoder


class ModelTestCases(unittest.TestCase):

    def setUp(self):
        self.model = Model('TensorFlow Lite v3', 'version 3')
        self.graph = Graph(self.model, 'main')

    def test_type_strings(self):
        self.assertEqual(str(TensorShape([1, 2])), '[1,2]')
        self.assertEqual(str(TensorShape()), '[]')
        self.assertEqual(str(TensorType('float32', TensorShape([1, 2]))), 'float32[1,2]')

    def test_initializer_value_and_preview(self):
        data = np.arange(6, dtype='<i4').tobytes()
        initializer = Initializer(4, 'c', TensorType('int32', TensorShape([2, 3])), data)
        self.assertEqual(initializer.id, '4')
        self.assertIsNone(initializer.state)
        self.assertEqual(initializer.value, [[0, 1, 2], [3, 4, 5]])
        self.assertEqual(str(initializer), json.dumps([[0, 1, 2], [3, 4, 5]], indent=4))

    def test_initializer_preview_is_bounded(self):
        count = decoder.PREVIEW_LIMIT + 5
        data = np.zeros(count, dtype='<i4').tobytes()
        initializer = Initializer(0, 'big', TensorType('int32', TensorShape([count])), data)
        preview = json.loads(str(initializer))
        self.assertEqual(len(preview), decoder.PREVIEW_LIMIT + 1)
        self.assertEqual(preview[-1], '...')
        self.assertEqual(len(initializer.value), count)

    def test_initializer_with_blocking_state(self):
        initializer = Initializer(0, 'short', TensorType('float32', TensorShape([8])), b'\x00' * 4)
        self.assertEqual(initializer.state, decoder.SHORT_STATE)
        self.assertIsNone(initializer.value)
        self.assertEqual(str(initializer), '')

    def test_initializer_decodes_once_per_access(self):
        data = np.arange(4, dtype='<f4').tobytes()
        initializer = Initializer(0, 'w', TensorType('float32', TensorShape([4])), data)
        with mock.patch.object(decoder, 'context', wraps=decoder.context) as context:
            self.assertEqual(initializer.value, [0.0, 1.0, 2.0, 3.0])
            self.assertEqual(context.call_count, 1)
            str(initializer)
            self.assertEqual(context.call_count, 2)

    def test_string_scalar_initializer(self):
        data = b'\x01\x00\x00\x00\x0c\x00\x00\x00\x0e\x00\x00\x00hi'
        initializer = Initializer(0, 's', TensorType('string', TensorShape([])), data)
        self.assertIsNone(initializer.state)
        self.assertEqual(initializer.value, 'hi')
        self.assertEqual(str(initializer), '"hi"')

    def test_initializer_requires_data(self):
        with self.assertRaises(AssertionError):
            Initializer(0, 'empty', TensorType('float32', TensorShape([1])), b'')

    def test_connection_type(self):
        own = Connection(self.graph, 'a', type=TensorType('int8', TensorShape([3])))
        initializer = Initializer(1, 'b', TensorType('uint8', TensorShape([1])), b'\x07')
        shared = Connection(self.graph, 'b', initializer=initializer, quantization='0.5 * q')
        self.assertEqual(str(own.type), 'int8[3]')
        self.assertIs(shared.type, initializer.type)
        self.assertEqual(shared.quantization, '0.5 * q')
        self.assertEqual([own.key, shared.key], [0, 1])

    def test_connection_needs_exactly_one_type_source(self):
        type = TensorType('int8', TensorShape([1]))
        with self.assertRaises(AssertionError):
            Connection(self.graph, 'a')
        with self.assertRaises(AssertionError):
            Connection(self.graph, 'a', type=type, initializer=Initializer(0, 'a', type, b'\x01'))

    def test_argument_resolves_keys(self):
        a = Connection(self.graph, 'a', type=TensorType('int8', TensorShape([1])))
        b = Connection(self.graph, 'b', type=TensorType('int8', TensorShape([1])))
        argument = Argument(self.graph, 'inputs', True, [b.key, a.key])
        self.assertEqual(argument.connections, (b, a))
        self.assertEqual(repr(argument), 'inputs: [b, a]')

    def test_node_registers_in_graph(self):
        Node(self.graph, 'Add')
        Node(self.graph, 'Add', attributes=[Attribute('axis', 1), Attribute('hidden', 0, visible=False)])
        self.assertEqual(len(self.graph.nodes), 2)
        self.assertEqual(dict(self.graph.operators), {'Add': 2})
        self.assertEqual([attribute.name for attribute in self.graph.nodes[1].attributes], ['axis'])
        self.assertEqual(len(self.graph.nodes[1].all_attributes), 2)

    def test_attribute_text(self):
        self.assertEqual(Attribute('a', [1, 2]).text, '[1, 2]')
        self.assertEqual(Attribute('a', True).text, 'true')
        self.assertEqual(Attribute('a', 2.0).text, '2')
        self.assertEqual(Attribute('a', 0.5).text, '0.5')
        self.assertEqual(Attribute('a', 'RELU').text, 'RELU')

    def test_model_views_are_read_only(self):
        self.assertEqual(len(self.model.graphs), 1)
        self.assertIs(self.model.main, self.graph)
        with self.assertRaises(AttributeError):
            self.model.graphs.append(self.graph)
        self.assertIsNone(Model('f', 'v', '').description)


if __name__ == '__main__':
    unittest.main()
