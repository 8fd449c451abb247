# -*- test-case-name: rbdvolume.drivers.test.test_rbd -*-
# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Ceph RADOS Block Device driver.

An RBD image is "map"ped, referenced by name, onto an OS block device with
``rbd map``.  The output of that command is the OS block device name.  Once
mapped the device can be inspected and formatted in the normal fashion, and
it is released again with ``rbd unmap``.

Images cloned from snapshots keep a chain of copy-on-write parents.  When
that chain grows too deep the kernel refuses to map the image and ``rbd map``
exits with status 22 (EINVAL).  Flattening the image removes the chain, after
which mapping succeeds.
"""

from errno import EINVAL
from subprocess import CalledProcessError

from characteristic import attributes
from pyrsistent import PClass, field
from zope.interface import implementer

from ..common.process import run_process, find_executable
from .interface import IVolumeDriver, VolumeDriverError
from .descriptor import volume_from_descriptor
from ._logging import (
    ATTACH, DETACH, FORMAT, MAP_FAILED_FLATTENING, FLATTEN_FAILED,
    MAP_RETRY_FAILED, MAPPED, UNMAP_FAILED, FILESYSTEM_FOUND,
    FILESYSTEM_CREATED,
)

RBD_DRIVER_NAME = u"rbd"

# ``run_process`` raises ``CalledProcessError`` for a non-zero exit status and
# ``OSError`` if the executable could not be started at all.
_COMMAND_FAILURES = (CalledProcessError, OSError)


@attributes(["tool_name"])
class ToolNotFoundError(VolumeDriverError):
    """
    Raised when a required executable is not on the search path.

    :ivar unicode tool_name: The name of the missing executable.
    """

    def __str__(self):
        return "{} command not found".format(self.tool_name)


@attributes(["volume_name", "cause"])
class MapFailedError(VolumeDriverError):
    """
    Raised when an image could not be mapped to a local block device.

    :ivar unicode volume_name: The name of the image.
    :ivar Exception cause: The failure of ``rbd map``.  If the image was
        flattened and mapping retried, this is the failure of the retry.  If
        flattening failed, this is the failure of the first attempt.
    """

    def __str__(self):
        return "rbd map {} failed: {}".format(self.volume_name, self.cause)


@attributes(["volume_name", "device", "cause"])
class InspectFailedError(VolumeDriverError):
    """
    Raised when the content type of a mapped device could not be determined.

    :ivar unicode volume_name: The name of the image.
    :ivar unicode device: The device the image is mapped to.
    :ivar Exception cause: The failure of ``file -s``.
    """

    def __str__(self):
        return "file -s on volume {} ({}) failed: {}".format(
            self.volume_name, self.device, self.cause)


@attributes(["volume_name", "device", "fs_type", "cause"])
class FormatFailedError(VolumeDriverError):
    """
    Raised when a filesystem could not be created on a mapped device.

    :ivar unicode volume_name: The name of the image.
    :ivar unicode device: The device the image is mapped to.
    :ivar unicode fs_type: The filesystem that was being created.
    :ivar Exception cause: The failure of ``mkfs``.
    """

    def __str__(self):
        return "rbd format of volume {} ({}) as {} failed: {}".format(
            self.volume_name, self.device, self.fs_type, self.cause)


def _device_from_output(output):
    """
    Extract the device path from the output of ``rbd map``.

    ``rbd`` may print warnings before the device path, so the last non-empty
    line is used.

    :param unicode output: The combined output of ``rbd map``.
    :return: The device path, or ``None`` if there was no output.
    """
    lines = output.strip().splitlines()
    if not lines:
        return None
    return lines[-1].strip()


@implementer(IVolumeDriver)
class RBDDriver(PClass):
    """
    An ``IVolumeDriver`` for Ceph RBD images, driven through the ``rbd``
    command line tool.

    Each operation assumes exclusive ownership of the image for its
    duration; no locking is done.

    :ivar run_process: Callable used to run external commands.  It must
        behave like ``rbdvolume.common.process.run_process``.
    :ivar find_executable: Callable used to locate external commands on the
        search path.  It must behave like
        ``rbdvolume.common.process.find_executable``.
    """
    run_process = field(initial=(lambda: run_process), mandatory=True)
    find_executable = field(initial=(lambda: find_executable), mandatory=True)

    def attach(self, descriptor, target_path):
        volume = volume_from_descriptor(descriptor)
        # Making the device available at ``target_path`` is done by the host
        # framework.
        ATTACH(volume_name=volume.name, target_path=target_path).finish()

    def detach(self, descriptor, target_path):
        volume = volume_from_descriptor(descriptor)
        DETACH(volume_name=volume.name, target_path=target_path).finish()

    def format(self, descriptor, fs_type):
        """
        Map the image, create a ``fs_type`` filesystem on it unless one is
        already there, and unmap it again.

        The device path is the last non-empty line of the output of
        ``rbd map`` rather than the whole output, since ``rbd`` may print
        warnings before it.
        """
        volume = volume_from_descriptor(descriptor)
        with FORMAT(volume_name=volume.name, fs_type=fs_type):
            # Both tools are resolved before anything is mapped.
            rbd = self._require(u"rbd")
            file_command = self._require(u"file")

            device = self._map(rbd, volume)
            try:
                self._ensure_filesystem(file_command, volume, device, fs_type)
            finally:
                self._unmap(rbd, device)

    def _require(self, tool_name):
        """
        :return: The path of ``tool_name`` on the search path.
        :raise ToolNotFoundError: If it is not there.
        """
        path = self.find_executable(tool_name)
        if path is None:
            raise ToolNotFoundError(tool_name=tool_name)
        return path

    def _map(self, rbd, volume):
        """
        Map ``volume`` to a local block device, flattening it and trying
        once more if the first attempt fails with EINVAL.

        :return: The path of the mapped device.
        :raise MapFailedError: If the image could not be mapped.
        """
        try:
            result = self.run_process([rbd, u"map", volume.name])
        except _COMMAND_FAILURES as e:
            if getattr(e, "returncode", None) != EINVAL:
                raise MapFailedError(volume_name=volume.name, cause=e)
            MAP_FAILED_FLATTENING.log(volume_name=volume.name, reason=str(e))
            try:
                self.run_process([rbd, u"flatten", volume.name])
            except _COMMAND_FAILURES as flatten_error:
                FLATTEN_FAILED.log(
                    volume_name=volume.name, reason=str(flatten_error))
                raise MapFailedError(volume_name=volume.name, cause=e)
            try:
                result = self.run_process([rbd, u"map", volume.name])
            except _COMMAND_FAILURES as retry_error:
                MAP_RETRY_FAILED.log(
                    volume_name=volume.name, reason=str(retry_error))
                raise MapFailedError(
                    volume_name=volume.name, cause=retry_error)

        device = _device_from_output(result.text())
        if device is None:
            raise MapFailedError(
                volume_name=volume.name,
                cause=ValueError("rbd map printed no device path"),
            )
        MAPPED.log(volume_name=volume.name, device=device)
        return device

    def _unmap(self, rbd, device):
        """
        Release ``device``.  Failures are logged and otherwise ignored so
        that they never hide the outcome of the operation.
        """
        try:
            self.run_process([rbd, u"unmap", device])
        except _COMMAND_FAILURES as e:
            UNMAP_FAILED.log(device=device, reason=str(e))

    def _ensure_filesystem(self, file_command, volume, device, fs_type):
        """
        Create a ``fs_type`` filesystem on ``device`` unless ``file -s``
        reports one is already there.
        """
        try:
            device_info = self.run_process(
                [file_command, u"-s", device]).text()
        except _COMMAND_FAILURES as e:
            raise InspectFailedError(
                volume_name=volume.name, device=device, cause=e)

        # ``file -s`` describes e.g. an ext4 device as
        # "/dev/rbd0: Linux rev 1.0 ext4 filesystem data, ...".
        if u"{} filesystem".format(fs_type) in device_info:
            FILESYSTEM_FOUND.log(
                device=device, fs_type=fs_type, device_info=device_info)
            return

        mkfs = self._require(u"mkfs.{}".format(fs_type))
        try:
            self.run_process([mkfs, device])
        except _COMMAND_FAILURES as e:
            raise FormatFailedError(
                volume_name=volume.name, device=device, fs_type=fs_type,
                cause=e,
            )
        FILESYSTEM_CREATED.log(device=device, fs_type=fs_type)
