# -*- test-case-name: rbdvolume.drivers.test.test_descriptor -*-
# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Conversion of the untyped volume descriptors supplied by the host framework
into ``RBDVolume`` records.
"""

from collections.abc import Mapping

from characteristic import attributes
from pyrsistent import PClass, field, pvector_field

from .interface import VolumeDriverError


@attributes(["key", "reason"])
class DecodeError(VolumeDriverError):
    """
    Raised when a volume descriptor does not have the shape of an
    ``RBDVolume``.

    :ivar key: The descriptor key which could not be decoded, or ``None`` if
        the descriptor as a whole is unusable.
    :ivar unicode reason: A description of the problem.
    """

    def __str__(self):
        if self.key is None:
            return "Invalid volume descriptor: {}".format(self.reason)
        return "Invalid volume descriptor key {!r}: {}".format(
            self.key, self.reason)


class RBDVolume(PClass):
    """
    The typed view of a volume descriptor.

    :ivar unicode name: The name of the RBD image.
    :ivar unicode keyring: Path of the Ceph keyring.
    :ivar bool auth_enabled: Whether cephx authentication is enabled.
    :ivar unicode auth_user: The cephx user name.
    :ivar PVector hosts: Ceph monitor hosts.  Parallel to ``ports``.
    :ivar PVector ports: Ceph monitor ports.  Parallel to ``hosts``.
    :ivar unicode access_mode: The access mode requested by the host
        framework.
    :ivar unicode volume_type: The backend volume type.
    """
    name = field(type=str, initial=u"")
    keyring = field(type=str, initial=u"")
    auth_enabled = field(type=bool, initial=False)
    auth_user = field(type=str, initial=u"")
    hosts = pvector_field(str)
    ports = pvector_field(str)
    access_mode = field(type=str, initial=u"")
    volume_type = field(type=str, initial=u"")

    def to_descriptor(self):
        """
        :return: A ``dict`` using the descriptor key names, suitable for
            passing back to ``volume_from_descriptor``.
        """
        return {
            u"name": self.name,
            u"keyring": self.keyring,
            u"auth_enabled": self.auth_enabled,
            u"auth_username": self.auth_user,
            u"hosts": list(self.hosts),
            u"ports": list(self.ports),
            u"access_mode": self.access_mode,
            u"volume_type": self.volume_type,
        }


def _text(descriptor, key):
    value = descriptor.get(key)
    if value is None:
        return u""
    if not isinstance(value, str):
        raise DecodeError(
            key=key,
            reason="expected a string, got {}".format(type(value).__name__),
        )
    return value


def _flag(descriptor, key):
    value = descriptor.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(
            key=key,
            reason="expected a boolean, got {}".format(type(value).__name__),
        )
    return value


def _texts(descriptor, key):
    value = descriptor.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise DecodeError(
            key=key,
            reason="expected a list of strings, got {}".format(
                type(value).__name__),
        )
    for index, element in enumerate(value):
        if not isinstance(element, str):
            raise DecodeError(
                key=key,
                reason="element {} is a {}, not a string".format(
                    index, type(element).__name__),
            )
    return list(value)


def volume_from_descriptor(descriptor):
    """
    Validate ``descriptor`` and convert it to an ``RBDVolume``.

    Keys the volume record doesn't know about are ignored.  Missing keys,
    ``name`` included, take an empty value.

    :param Mapping descriptor: The volume description from the host
        framework.

    :raises DecodeError: If ``descriptor`` is not a mapping or has a value
        of an incompatible type.
    :return: An ``RBDVolume``.
    """
    if not isinstance(descriptor, Mapping):
        raise DecodeError(
            key=None,
            reason="expected a mapping, got {}".format(
                type(descriptor).__name__),
        )

    return RBDVolume(
        name=_text(descriptor, u"name"),
        keyring=_text(descriptor, u"keyring"),
        auth_enabled=_flag(descriptor, u"auth_enabled"),
        auth_user=_text(descriptor, u"auth_username"),
        hosts=_texts(descriptor, u"hosts"),
        ports=_texts(descriptor, u"ports"),
        access_mode=_text(descriptor, u"access_mode"),
        volume_type=_text(descriptor, u"volume_type"),
    )
