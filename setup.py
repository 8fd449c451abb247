# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Generate an rbdvolume package that can be deployed onto cluster nodes.
"""

from setuptools import setup, find_packages

with open("README.rst") as readme:
    description = readme.read()

install_requires = [
    "bitmath",
    "characteristic",
    "eliot>=1.11",
    "jsonschema",
    "pyrsistent",
    "PyYAML",
    "Twisted",
    "zope.interface",
]

dev_requires = [
    "fixtures",
    "hypothesis",
    "pytest",
    "testtools",
]

setup(
    # This is the human-targetted name of the software being packaged.
    name="rbdvolume",
    # This is a string giving the version of the software being packaged.  For
    # simplicity it should be something boring like X.Y.Z.
    version="0.1.0",
    # This identifies the creators of this software.  This is left symbolic for
    # ease of maintenance.
    author="ClusterHQ Team",
    # This is contact information for the authors.
    author_email="support@clusterhq.com",
    # Here is a website where more information about the software is available.
    url="https://clusterhq.com/",

    # A short identifier for the license under which the project is released.
    license="Apache License, Version 2.0",

    # Some details about what rbdvolume is.  Synchronized with the README.rst
    # to keep it up to date more easily.
    long_description=description,

    # This setuptools helper will find everything that looks like a *Python*
    # package (in other words, things that can be imported) which are part of
    # the rbdvolume package.
    packages=find_packages(include=('rbdvolume', 'rbdvolume.*')),

    python_requires=">=3.8",

    entry_points={
        # These are the command-line programs we want setuptools to install.
        'console_scripts': [
            'rbdvolume-driver = rbdvolume.script:rbdvolume_driver_main',
        ],
    },

    install_requires=install_requires,

    extras_require={
        # This extra is for developers who need to work on rbdvolume itself.
        "dev": dev_requires,
    },

    # Some "trove classifiers" which are relevant.
    classifiers=[
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        ],
    )
