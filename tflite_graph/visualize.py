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

from .io.lite import Reader, TFLiteFormatError
from graphviz import Digraph
import argparse
import html
import os


def _text_with_size(text, size):
    return '<FONT POINT-SIZE="{}">{}</FONT>'.format(size, text)


def _truncate(text, max_length=32):
    return text[:max_length - 3] + "..." if len(text) > max_length else text


def _format_connection_label(connection):
    return '< {}<BR/> {}>'.format(html.escape(connection.id), _text_with_size(str(connection.type), size=10))


def _attribs_str(node, separator):
    return ["{}{}{}".format(attribute.name, separator, html.escape(_truncate(attribute.text)))
            for attribute in node.attributes]


def _format_node_details(node):
    s = [
        "inputs: " + ", ".join(connection.id for argument in node.inputs for connection in argument.connections),
        "outputs: " + ", ".join(connection.id for argument in node.outputs for connection in argument.connections),
    ]

    s.extend(_attribs_str(node, separator=': '))

    return "&#13;&#10;".join(s)


def _format_node_label(node):
    attrs = (_text_with_size(s, size=10) for s in _attribs_str(node, separator='='))
    return '<{}<BR/>{}>'.format(html.escape(node.operator), '<BR/>'.join(attrs)) \
        if len(node.attributes) else node.operator


def _producers(graph):
    producers = {}
    for node in graph.nodes:
        for argument in node.outputs:
            for key in argument.keys:
                producers[key] = node
    return producers


def _generate_digraph(graph, show_initializers=False, verbose=False):
    digraph = Digraph(name=graph.name or None)
    producers = _producers(graph)

    for node in graph.nodes:
        digraph.node(str(id(node)), _format_node_label(node) if verbose else node.operator, shape="box",
                     tooltip=_format_node_details(node), style="filled" if node.custom else "solid")

    for node in graph.nodes:
        for argument in node.inputs:
            if not argument.visible:
                continue
            for key, connection in zip(argument.keys, argument.connections):
                producer = producers.get(key)
                if producer is not None:
                    digraph.edge(str(id(producer)), str(id(node)),
                                 label=_format_connection_label(connection) if verbose else "  " + connection.id,
                                 labeltooltip=str(connection.type))
                elif connection.initializer is not None and show_initializers:
                    digraph.node(str(id(connection)), connection.id, shape="note", tooltip=str(connection.type))
                    digraph.edge(str(id(connection)), str(id(node)), label=None)

    for argument in graph.inputs:
        for key, connection in zip(argument.keys, argument.connections):
            digraph.node(str(id(connection)), _format_connection_label(connection) if verbose else connection.id,
                         shape="ellipse", tooltip=str(connection.type))
            for node in graph.nodes:
                if any(key in input.keys for input in node.inputs):
                    digraph.edge(str(id(connection)), str(id(node)), label=None)

    for argument in graph.outputs:
        for key, connection in zip(argument.keys, argument.connections):
            digraph.node(str(id(connection)), _format_connection_label(connection) if verbose else connection.id,
                         shape="ellipse", tooltip=str(connection.type))
            producer = producers.get(key)
            if producer is not None:
                digraph.edge(str(id(producer)), str(id(connection)), label=None)

    return digraph


def main(args):
    try:
        model = Reader()(args.model)
    except IOError as e:
        print(e)
        return -1
    except TFLiteFormatError as e:
        print(e)
        if e.details:
            for detail in e.details:
                print(detail)
        return -1

    for index, graph in enumerate(model.graphs):
        digraph = _generate_digraph(graph, args.show_initializers, args.verbose)
        basename = args.model if len(model.graphs) == 1 else args.model + '.' + str(index)
        digraph.render(basename + '.gv', format=args.format, cleanup=True)
        os.rename(basename + '.gv.' + args.format, basename + '.' + args.format)
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('model', type=str,
                        help='The model to visualize')
    parser.add_argument('--verbose', action='store_true',
                        help='Add more info to the nodes and edges')
    parser.add_argument('--show-initializers', action='store_true',
                        help='Show constant tensors explicitly')
    parser.add_argument('--format', type=str, choices=['svg', 'pdf', 'png', 'dot'], default='svg',
                        help='The format of the output')
    exit(main(parser.parse_args()))
