# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Eliot log structures for the volume drivers.
"""

from eliot import Field, ActionType, MessageType

VOLUME_NAME = Field.for_types(
    u"volume_name", [str],
    u"The name of the RBD image being operated on.")
TARGET_PATH = Field.for_types(
    u"target_path", [str],
    u"The path the host framework asked the volume to be attached at.")
FS_TYPE = Field.for_types(
    u"fs_type", [str],
    u"The type of filesystem the volume should carry.")
DEVICE = Field.for_types(
    u"device", [str],
    u"The local block device the image is mapped to.")
REASON = Field.for_types(
    u"reason", [str],
    u"A description of why the external command failed.")
DEVICE_INFO = Field.for_types(
    u"device_info", [str],
    u"The output of ``file -s`` for the mapped device.")

RBD_LOG_HEADER = u"rbdvolume:drivers:rbd"

ATTACH = ActionType(
    RBD_LOG_HEADER + u":attach",
    [VOLUME_NAME, TARGET_PATH],
    [],
    u"An RBD volume is being attached.")

DETACH = ActionType(
    RBD_LOG_HEADER + u":detach",
    [VOLUME_NAME, TARGET_PATH],
    [],
    u"An RBD volume is being detached.")

FORMAT = ActionType(
    RBD_LOG_HEADER + u":format",
    [VOLUME_NAME, FS_TYPE],
    [],
    u"An RBD volume is being mapped and given a filesystem if it lacks one.")

MAP_FAILED_FLATTENING = MessageType(
    RBD_LOG_HEADER + u":map_failed_flattening",
    [VOLUME_NAME, REASON],
    u"Mapping failed with EINVAL, which usually means the image has too many "
    u"parent layers.  The image will be flattened and mapped again.")

FLATTEN_FAILED = MessageType(
    RBD_LOG_HEADER + u":flatten_failed",
    [VOLUME_NAME, REASON],
    u"Flattening the image failed; the original map failure is reported.")

MAP_RETRY_FAILED = MessageType(
    RBD_LOG_HEADER + u":map_retry_failed",
    [VOLUME_NAME, REASON],
    u"Mapping the image failed again after it was flattened.")

MAPPED = MessageType(
    RBD_LOG_HEADER + u":mapped",
    [VOLUME_NAME, DEVICE],
    u"The image has been mapped to a local block device.")

UNMAP_FAILED = MessageType(
    RBD_LOG_HEADER + u":unmap_failed",
    [DEVICE, REASON],
    u"The mapped device could not be released.")

FILESYSTEM_FOUND = MessageType(
    RBD_LOG_HEADER + u":filesystem_found",
    [DEVICE, FS_TYPE, DEVICE_INFO],
    u"The device already carries a filesystem of the requested type.")

FILESYSTEM_CREATED = MessageType(
    RBD_LOG_HEADER + u":filesystem_created",
    [DEVICE, FS_TYPE],
    u"A new filesystem was created on the device.")
