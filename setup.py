#!/usr/bin/env python

from setuptools import setup, find_packages
from io import open
import os

import davshare

README = open(os.path.join(os.path.dirname(__file__), 'README.md'), 'r', encoding='utf-8').read()

setup(name='davshare',
    description=davshare.__doc__.strip().splitlines()[0],
    author=davshare.__author__,
    author_email=davshare.__email__,
    maintainer=davshare.__author__,
    maintainer_email=davshare.__email__,
    platforms=['Unix', 'Windows'],
    license=davshare.__license__,
    version=davshare.__version__,
    long_description=README,
    long_description_content_type='text/markdown',
    python_requires='>=3.8',
    classifiers=[
      'Development Status :: 4 - Beta',
      'Environment :: Console',
      'Environment :: Web Environment',
      'Intended Audience :: Developers',
      'Intended Audience :: System Administrators',
      'License :: OSI Approved :: GNU General Public License (GPL)',
      'Operating System :: MacOS :: MacOS X',
      'Operating System :: POSIX',
      'Programming Language :: Python',
      'Programming Language :: Python :: 3',
      'Topic :: Internet :: WWW/HTTP :: HTTP Servers',
      ],
    keywords=['webdav',
              'server',
              'dav',
              'standalone',
              'file sharing',
              'http',
              'rfc4918',
              ],
    packages=find_packages(exclude=['test', 'test.*']),
    entry_points={
      'console_scripts': ['davshare = davshare.server.server:run']
      },
    install_requires=[],
    extras_require={
      'test': ['pytest'],
      },
    )
