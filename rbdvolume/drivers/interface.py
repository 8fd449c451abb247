# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
The interface provided by every volume driver.
"""

from zope.interface import Interface


class VolumeDriverError(Exception):
    """
    Base class for all errors raised by volume driver operations.
    """


class IVolumeDriver(Interface):
    """
    A driver which can make a volume described by the host framework
    available on this node.

    Each operation receives the untyped volume descriptor supplied by the host
    framework and is responsible for validating it.  All operations are
    synchronous and block until any external tools they run have exited.
    """

    def attach(descriptor, target_path):
        """
        Make the volume available at ``target_path``.

        :param dict descriptor: The host framework's description of the
            volume.
        :param str target_path: The path the host framework expects the
            volume to be available at.

        :raises VolumeDriverError: On any failure.
        """

    def detach(descriptor, target_path):
        """
        Withdraw the volume from ``target_path``.

        :param dict descriptor: The host framework's description of the
            volume.
        :param str target_path: The path the volume was attached at.

        :raises VolumeDriverError: On any failure.
        """

    def format(descriptor, fs_type):
        """
        Ensure the volume carries a filesystem of type ``fs_type``, creating
        one only if it is absent.

        :param dict descriptor: The host framework's description of the
            volume.
        :param str fs_type: The filesystem type, e.g. ``"ext4"``.

        :raises VolumeDriverError: On any failure.
        """
