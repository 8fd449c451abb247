# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Shared rbdvolume components.
"""

__all__ = [
    'run_process', 'find_executable',
    'DriverRegistry',
]

from .process import run_process, find_executable
from .plugin import DriverRegistry
