# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Volume drivers.
"""

__all__ = [
    'IVolumeDriver', 'VolumeDriverError',
    'register_builtin_drivers', 'driver_registry',
]

from ..common.plugin import DriverRegistry
from .interface import IVolumeDriver, VolumeDriverError
from .rbd import RBD_DRIVER_NAME, RBDDriver


def register_builtin_drivers(registry):
    """
    Register the drivers shipped with rbdvolume.

    :param DriverRegistry registry: The registry to add the drivers to.
    """
    registry.register(RBD_DRIVER_NAME, RBDDriver)


def driver_registry():
    """
    :return: A new ``DriverRegistry`` requiring ``IVolumeDriver`` providers
        and holding the builtin drivers.
    """
    registry = DriverRegistry(interface=IVolumeDriver)
    register_builtin_drivers(registry)
    return registry
