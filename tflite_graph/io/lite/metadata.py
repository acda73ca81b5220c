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
from .helpers import LOGGING_LEVEL, NO_CONNECTION, positional_name
import logging
import json
import os


DEFAULT_METADATA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'tflite-metadata.json')

VARIADIC = 'variadic'


MappedInput = namedtuple('MappedInput', ['name', 'visible', 'connections'])


class OperatorMetadata:
    """
    Read-only catalog of operator schemas, indexed by operator name.

    Items are records of the form {"name": ..., "schema": {"category", "inputs", "outputs", "attributes"}};
    entries without a name or schema are skipped.
    """

    def __init__(self, items=None):
        self._schemas = {}
        self._attributes = {}

        for item in items or []:
            if not isinstance(item, dict) or not item.get('name') or not isinstance(item.get('schema'), dict):
                logging.log(LOGGING_LEVEL, "Skipping malformed operator metadata entry: {}".format(item))
                continue

            name = item['name']
            schema = item['schema']
            self._schemas[name] = schema

            for attribute in schema.get('attributes') or []:
                if isinstance(attribute, dict) and attribute.get('name'):
                    self._attributes[(name, attribute['name'])] = attribute

    @staticmethod
    def from_json(text):
        items = json.loads(text) if text else None
        if items is not None and not isinstance(items, list):
            logging.log(LOGGING_LEVEL, "Operator metadata document is not a list")
            items = None
        return OperatorMetadata(items)

    @staticmethod
    def from_file(path):
        with open(path, 'r', encoding='utf-8') as file:
            return OperatorMetadata.from_json(file.read())

    @staticmethod
    def default():
        return OperatorMetadata.from_file(DEFAULT_METADATA_FILE)

    @property
    def operators(self):
        return sorted(self._schemas.keys())

    def get_schema(self, operator):
        return self._schemas.get(operator)

    def get_category(self, operator):
        schema = self._schemas.get(operator)
        return schema.get('category') if schema is not None else None

    def get_inputs(self, inputs, operator):
        """
        Groups the raw input indices of an operator into named arguments.

        A slot declared variadic consumes all remaining indices; slots beyond the declared
        inputs get a positional name. Indices equal to the no-connection sentinel are dropped.
        """
        inputs = list(inputs)
        schema = self._schemas.get(operator)
        declared = (schema.get('inputs') or []) if schema is not None else []

        results = []
        index = 0
        while index < len(inputs):
            count = 1
            name = None
            visible = True
            if index < len(declared) and isinstance(declared[index], dict):
                input = declared[index]
                name = input.get('name')
                if input.get('option') == VARIADIC:
                    count = len(inputs) - index
                if input.get('visible', True) is False:
                    visible = False

            connections = [key for key in inputs[index:index + count] if key != NO_CONNECTION]
            results.append(MappedInput(name or positional_name(index), visible, connections))
            index += count

        return results

    def get_output_name(self, operator, index):
        schema = self._schemas.get(operator)
        outputs = (schema.get('outputs') or []) if schema is not None else []
        if index < len(outputs) and isinstance(outputs[index], dict):
            output = outputs[index]
            if output.get('option') != VARIADIC and output.get('name'):
                return output['name']
        return positional_name(index)

    def get_attribute_schema(self, operator, name):
        return self._attributes.get((operator, name))
