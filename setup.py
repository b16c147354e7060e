#!/usr/bin/env python
"""Setuptools distribution file."""
import os
from setuptools import setup


def _get_here(fname):
    return os.path.join(os.path.dirname(__file__), fname)


def _get_long_description(fname, encoding='utf8'):
    return open(fname, 'r', encoding=encoding).read()


setup(name='tinytelnet',
      use_scm_version={
          "version_scheme": "guess-next-dev",
          "local_scheme": "dirty-tag",
          "fallback_version": "0.1.0",
      },
      setup_requires=[
          "setuptools_scm",
      ],
      license='ISC',
      description="Minimal anyio Telnet client",
      long_description=_get_long_description(fname=_get_here('README.rst')),
      packages=['tinytelnet'],
      package_data={'': ['README.rst', 'requirements.txt'], },
      entry_points={
         'console_scripts': [
             'tinytelnet = tinytelnet.client:main',
         ]},
      platforms='any',
      zip_safe=True,
      python_requires='>=3.9',
      install_requires=[
         'anyio>=4.7',
      ],
      extras_require={
         'test': [
             'pytest',
             'trio>=0.32',
             'pexpect',
         ],
      },
      keywords=', '.join(('telnet', 'client', 'terminal', 'anyio', 'trio',
                          'asyncio')),
      classifiers=['License :: OSI Approved :: ISC License (ISCL)',
                   'Programming Language :: Python :: 3',
                   'Intended Audience :: Developers',
                   'Development Status :: 3 - Alpha',
                   'Topic :: System :: Networking',
                   'Topic :: Terminals :: Telnet',
                   'Topic :: Internet',
                   ],
      )
