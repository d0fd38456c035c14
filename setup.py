"""
Setup script for corrsketch package
"""

# Always prefer setuptools over distutils
from setuptools import setup, find_packages
# To use a consistent encoding
from codecs import open
from os import path

here = path.abspath(path.dirname(__file__))

# Get the long description from the relevant file
with open(path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()

# Get the code version
version = {}
with open(path.join(here, "corrsketch/version.py")) as fp:
    exec(fp.read(), version)
__version__ = version['__version__']

setup(
    name='corrsketch',
    version=__version__,
    description='Sketches for estimating join sizes and correlations between joinable columns',
    long_description=long_description,
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Topic :: Database',
        'Topic :: Scientific/Engineering :: Information Analysis',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    keywords='database datamining sketch correlation mutual-information',
    packages=find_packages(include=['corrsketch*']),
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.17',
        'scipy>=1.6.0',
    ],
    extras_require={
        'test': [
            'pytest>=6.0',
            'coverage',
        ],
    },
)
