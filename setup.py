#!/usr/bin/env python

from setuptools import setup
import os


def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


# read in the version number
with open('pegread/__init__.py') as f:
    for line in f:
        if line.startswith('__version__'):
            __version__ = line.split('=')[1].strip().strip("'")

options = {
    'name': 'pegread',
    'version': __version__,
    'description': 'Reader for LECO ChromaTOF .peg GC-MS files',
    'license': 'BSD 3-Clause',
    'platforms': ['Any'],
    'classifiers': [
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering :: Chemistry'
    ],
    'long_description': read('README.md'),
    'long_description_content_type': 'text/markdown',
    'packages': [
        'pegread', 'pegread.spectra', 'pegread.trace', 'pegread.tracefile'
    ],
    'python_requires': '>=3.7',
    'install_requires': ['numpy>=1.17.0', 'scipy>=1.2.0'],
    'extras_require': {
        'test': ['pytest'],
    }
}

# all the magic happens right here
setup(**options)
