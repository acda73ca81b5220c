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

from .io.lite import Reader, OperatorMetadata, TFLiteFormatError
import argparse
import logging
import sys


def main(args):
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        metadata = OperatorMetadata.from_file(args.metadata) if args.metadata else OperatorMetadata.default()
        reader = Reader(metadata=metadata)
        model = reader(args.model)
        model.print(file=sys.stdout, values=args.values)
        return 0
    except IOError as e:
        print(e)
        return -1
    except TFLiteFormatError as e:
        print(e)
        if e.details:
            for detail in e.details:
                print(detail)
        return -1


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('model', type=str,
                        help='The TensorFlow Lite model to describe')
    parser.add_argument('--metadata', type=str, default=None,
                        help='Operator metadata file to use instead of the bundled one')
    parser.add_argument('--values', action='store_true',
                        help='Print a preview of constant tensor values')
    parser.add_argument('--verbose', action='store_true',
                        help='Log decoding fallbacks')
    exit(main(parser.parse_args()))
