# -*- test-case-name: rbdvolume.test.test_script -*-
# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
The command-line ``rbdvolume-driver`` tool.
"""

import json
import sys

import yaml

from jsonschema import Draft4Validator, ValidationError

from pyrsistent import PClass, field

from zope.interface import implementer

from twisted.python.filepath import FilePath
from twisted.python.usage import Options, UsageError

from .common.plugin import DriverNotFound, InvalidDriver
from .common.script import (
    ICommandLineScript, standard_options, ScriptRunner,
)
from .drivers import VolumeDriverError, driver_registry

__all__ = [
    "rbdvolume_driver_main",
]

DEFAULT_CONFIG_PATH = "/etc/rbdvolume/driver.yml"

DEFAULT_DRIVER = u"rbd"
DEFAULT_FS_TYPE = u"ext4"

# Exit status when the driver reports a failure; 1 is used for usage errors.
DRIVER_ERROR_STATUS = 2

CONFIGURATION_SCHEMA = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "required": ["version"],
    "additionalProperties": False,
    "properties": {
        "version": {
            "type": "number",
            "maximum": 1,
            "minimum": 1,
        },
        "driver": {
            "type": "string",
            "minLength": 1,
        },
        "fs-type": {
            "type": "string",
            "pattern": "^[A-Za-z0-9_]+$",
        },
    },
}


def rbdvolume_driver_main():
    """
    Implementation of the ``rbdvolume-driver`` command line script.
    """
    return ScriptRunner(
        script=DriverScript(),
        options=DriverOptions(),
    ).main()


def validate_configuration(configuration):
    """
    Validate a provided configuration.

    :param dict configuration: A desired configuration for the driver.

    :raises: jsonschema.ValidationError if the configuration is invalid.
    """
    Draft4Validator(CONFIGURATION_SCHEMA).validate(configuration)


def get_configuration(config_path):
    """
    Load and validate the configuration in ``config_path``.

    A missing file is equivalent to an empty version 1 configuration.

    :param FilePath config_path: The location of the configuration file.

    :raise UsageError: If the file can't be parsed or is invalid.
    :return: A ``dict`` representing the configuration with defaults filled
        in.
    """
    if config_path.exists():
        try:
            configuration = yaml.safe_load(config_path.getContent())
        except yaml.YAMLError as e:
            raise UsageError(
                u"Configuration error: {} is not valid YAML: {}".format(
                    config_path.path, e))
        try:
            validate_configuration(configuration)
        except ValidationError as e:
            raise UsageError(
                u"Configuration error: {}: {}".format(
                    config_path.path, e.message))
    else:
        configuration = {u"version": 1}

    configuration.setdefault(u"driver", DEFAULT_DRIVER)
    configuration.setdefault(u"fs-type", DEFAULT_FS_TYPE)
    return configuration


def _parse_descriptor(argument):
    """
    :param unicode argument: A JSON object given on the command line.

    :raise UsageError: If ``argument`` is not a JSON object.
    :return: The decoded ``dict``.
    """
    try:
        descriptor = json.loads(argument)
    except ValueError as e:
        raise UsageError(u"Descriptor is not valid JSON: {}".format(e))
    if not isinstance(descriptor, dict):
        raise UsageError(u"Descriptor must be a JSON object.")
    return descriptor


class _AttachmentOptions(Options):
    """
    Arguments shared by ``attach`` and ``detach``.
    """
    def parseArgs(self, descriptor, target_path):
        self["descriptor"] = _parse_descriptor(descriptor)
        self["target_path"] = target_path


class AttachOptions(_AttachmentOptions):
    synopsis = "<descriptor-json> <target-path>"
    longdesc = "Attach the volume described by the JSON object."


class DetachOptions(_AttachmentOptions):
    synopsis = "<descriptor-json> <target-path>"
    longdesc = "Detach the volume described by the JSON object."


class FormatOptions(Options):
    synopsis = "<descriptor-json> [<fs-type>]"
    longdesc = """\
    Map the volume described by the JSON object and create a filesystem on it
    unless it already has one of the requested type.  The filesystem type
    defaults to the ``fs-type`` configuration setting.
    """

    def parseArgs(self, descriptor, fs_type=None):
        self["descriptor"] = _parse_descriptor(descriptor)
        self["fs_type"] = fs_type


@standard_options
class DriverOptions(Options):
    """
    Command line options for ``rbdvolume-driver``.
    """
    synopsis = "Usage: rbdvolume-driver [OPTIONS] <command> [ARGUMENTS]"

    longdesc = """\
    rbdvolume-driver attaches, detaches and formats volumes on behalf of a
    host volume-orchestration framework.
    """

    optParameters = [
        ["config", "c", DEFAULT_CONFIG_PATH,
         "The configuration file for the driver."],
    ]

    subCommands = [
        ["attach", None, AttachOptions, "Attach a volume."],
        ["detach", None, DetachOptions, "Detach a volume."],
        ["format", None, FormatOptions,
         "Create a filesystem on a volume if it lacks one."],
    ]

    def postOptions(self):
        if self.subCommand is None:
            raise UsageError(u"A command is required.")
        self['config'] = FilePath(self['config'])


@implementer(ICommandLineScript)
class DriverScript(PClass):
    """
    Implement top-level logic for the ``rbdvolume-driver`` script.

    :ivar registry_factory: A no-argument callable returning the
        ``DriverRegistry`` to look the configured driver up in.
    :ivar sys_module: A ``sys`` like module whose ``stderr`` driver errors
        are reported on.
    """
    registry_factory = field(initial=(lambda: driver_registry),
                             mandatory=True)
    sys_module = field(initial=(lambda: sys), mandatory=True)

    def main(self, options):
        configuration = get_configuration(options["config"])
        registry = self.registry_factory()
        try:
            driver = registry.create(configuration[u"driver"])
        except (DriverNotFound, InvalidDriver) as e:
            raise UsageError(u"Configuration error: {}".format(e))

        arguments = options.subOptions
        try:
            if options.subCommand == "attach":
                driver.attach(
                    arguments["descriptor"], arguments["target_path"])
            elif options.subCommand == "detach":
                driver.detach(
                    arguments["descriptor"], arguments["target_path"])
            else:
                driver.format(
                    arguments["descriptor"],
                    arguments["fs_type"] or configuration[u"fs-type"])
        except VolumeDriverError as e:
            self.sys_module.stderr.write(u"ERROR: {}\n".format(e))
            return DRIVER_ERROR_STATUS
