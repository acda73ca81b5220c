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

from setuptools import setup, find_packages
import shutil
import os


if os.path.exists('build'):
    shutil.rmtree('build')
if os.path.exists('dist'):
    shutil.rmtree('dist')
if os.path.exists('tflite_graph.egg-info'):
    shutil.rmtree('tflite_graph.egg-info')


setup(name='tflite_graph',
      version='1.0',
      description='A package for reading TensorFlow Lite models into a logical graph',
      url='https://github.com/KhronosGroup/NNEF-Tools',
      license='Apache 2.0',
      classifiers=
      [
          'Intended Audience :: Developers',
          'License :: OSI Approved :: Apache Software License',
          'Programming Language :: Python :: 3',
      ],
      keywords='tflite',
      packages=['tflite_graph'] + ['tflite_graph.' + package for package in find_packages(where='tflite_graph')],
      package_data={'tflite_graph.io.lite': ['tflite-metadata.json']},
      python_requires='>=3.7',
      install_requires=['numpy', 'flatbuffers>=2.0', 'graphviz'],
      )
