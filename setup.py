# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS-IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Module setuptools script."""

import os

from setuptools import setup, find_packages
from importlib import import_module

here = os.path.abspath(os.path.dirname(__file__))
meta_module = import_module('segtree')
meta = meta_module.__dict__
with open(os.path.join(here, 'README.md'), mode='r', encoding='utf-8') as f:
    readme = f.read()

setup(
    name=meta['__TITLE__'],
    version=meta['__VERSION__'],
    description=meta['__DESCRIPTION__'],
    long_description=readme,
    long_description_content_type='text/markdown',
    author=meta['__AUTHOR__'],
    author_email=meta['__AUTHOR_EMAIL__'],
    license='Apache License, Version 2.0',
    keywords='segment tree, range query, data structure',
    packages=[
        *find_packages(include=('segtree', "segtree.*")),
    ],
    python_requires=">=3.7",
    install_requires=[
        'numpy>=1.18.0',
        'DI-toolkit>=0.1.0',
        'easydict>=1.9',
    ],
    extras_require={
        'test': [
            'coverage>=5',
            'pytest>=7.0.1',
            'pytest-cov>=3.0.0',
            'pytest-xdist>=1.34.0',
        ],
        'style': [
            'yapf==0.29.0',
            'flake8<=3.9.2',
        ],
        'fast': [
            'numba>=0.53.0',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        "Intended Audience :: Science/Research",
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX :: Linux',
        'Operating System :: Microsoft :: Windows',
        'Operating System :: MacOS :: MacOS X',
        'Programming Language :: Python :: 3.7',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
    ],
)
