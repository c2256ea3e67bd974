#!/usr/bin/env python

from setuptools import setup

setup(
    name='framestosvg',
    version='0.1.0',
    license='BSD 3-clause license',
    description='Render captured terminal frames as a single animated SVG',
    long_description='Deduplicates terminal screen snapshots and renders them '
                     'as a standalone SVG animation driven by CSS keyframes, '
                     'without any script.',
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Terminals'
    ],
    python_requires='>=3.6',
    packages=[
        'framestosvg',
        'framestosvg.tests'
    ],
    scripts=['scripts/framestosvg'],
    install_requires=[
        'lxml',
        'pyte',
        'wcwidth',
    ],
    extras_require={
        'dev': [
            'coverage',
            'pylint',
            'twine',
            'wheel',
        ]
    }
)
