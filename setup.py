#!/usr/bin/env python

import re
from pathlib import Path

from setuptools import setup, find_namespace_packages

long_description = Path('README.md').read_text(encoding='utf-8', errors='ignore')
# Read package metadata without importing the package (which needs its dependencies installed).
init_text = Path('namefixer/__init__.py').read_text(encoding='utf-8')
version = re.search(r"^__version__\s*=\s*'([^']+)'", init_text, re.MULTILINE).group(1)
description = re.search(r"^__description__\s*=\s*'''(.+?)'''", init_text, re.MULTILINE | re.DOTALL).group(1)

classifiers = [  # copied from https://pypi.org/classifiers/
    'Development Status :: 4 - Beta',
    'Intended Audience :: Developers',
    'Topic :: Utilities',
    'Topic :: Text Processing',
    'Topic :: Text Processing :: Filters',
    'Topic :: Database',
    'License :: OSI Approved :: Apache Software License',
    'Programming Language :: Python :: 3 :: Only',
]

setup(
    name='namefixer',
    version=version,
    description=description,
    long_description=long_description,
    long_description_content_type='text/markdown',
    classifiers=classifiers,
    python_requires='>=3.8',
    platforms=['any'],
    packages=find_namespace_packages(include=['namefixer', 'namefixer.*']),
    keywords=['names', 'mojibake', 'encoding repair', 'data cleaning', 'CSV', 'normalization'],
    entry_points={
        'console_scripts': [
            'nf_normalize.py=namefixer.nf_normalize:main',
            'nf_records.py=namefixer.nf_records:main',
            'nf_analysis.py=namefixer.nf_analysis:main',
            'nf-norm=namefixer.nf_normalize:main',
            'nf-csv=namefixer.nf_records:main',
            'nf-ana=namefixer.nf_analysis:main',
        ],
    },
    install_requires=[
        'regex>=2021.8.3',
        'tqdm>=4.40',
        'unicodeblock>=0.3.1',
        'wheel>=0.38.4',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    package_data={'namefixer': ['data/*.tsv', 'data/*.txt']},
    include_package_data=True,
    zip_safe=False,
)
