# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Test helpers for ``rbdvolume.drivers``.
"""

from errno import EINVAL, ENOENT

from twisted.python.filepath import FilePath

from ..common.process import _CalledProcessError, _ProcessResult
from .rbd import RBDDriver

FAKE_BIN = FilePath(u"/fake/bin")

# The kernel client refuses to map images with more parents than this.
FAKE_MAX_PARENTS = 16

DEFAULT_TOOLS = (u"rbd", u"file", u"mkfs.ext4", u"mkfs.xfs")


class _FakeImage(object):
    """
    The state of one RBD image in a ``FakeRBD``.

    :ivar unicode name: The image name.
    :ivar int parents: The length of the copy-on-write parent chain.
    :ivar filesystem: The type of filesystem on the image, or ``None``.
    """
    def __init__(self, name, parents, filesystem):
        self.name = name
        self.parents = parents
        self.filesystem = filesystem


class FakeRBD(object):
    """
    An in-memory model of a Ceph cluster and the ``rbd``, ``file`` and
    ``mkfs.*`` tools used to manipulate it.

    ``run_process`` and ``find_executable`` have the same signatures as the
    functions in ``rbdvolume.common.process`` so that they can be given to
    ``RBDDriver``.

    :ivar set tools: The names of the executables which are "installed".
    :ivar dict images: ``_FakeImage`` instances keyed on image name.
    :ivar dict mapped: Image names keyed on the device they're mapped to.
    :ivar list calls: An argument tuple for every command run, with the
        executable replaced by its base name.
    :ivar int next_device: The number of the next ``/dev/rbdN`` device.
    """
    def __init__(self, tools=DEFAULT_TOOLS):
        self.tools = set(tools)
        self.images = {}
        self.mapped = {}
        self.calls = []
        self.next_device = 0
        self._failures = {}

    def driver(self):
        """
        :return: An ``RBDDriver`` which runs its commands against this fake.
        """
        return RBDDriver(
            run_process=self.run_process,
            find_executable=self.find_executable,
        )

    def create_image(self, name, parents=0, filesystem=None):
        """
        Add an image to the fake cluster.
        """
        self.images[name] = _FakeImage(name, parents, filesystem)

    def fail(self, argv, status=1, output=b"", times=1):
        """
        Make the next ``times`` runs of ``argv`` fail.

        :param tuple argv: The arguments of the command, beginning with the
            base name of the executable.
        :param int status: The exit status to fail with.
        :param bytes output: The output of the failing command.
        """
        self._failures.setdefault(tuple(argv), []).extend(
            [(status, output)] * times)

    def count(self, *argv):
        """
        :return: The number of times the command ``argv`` was run.
        """
        return self.calls.count(argv)

    def find_executable(self, name):
        if name not in self.tools:
            return None
        return FAKE_BIN.child(name).path

    def run_process(self, command):
        argv = (FilePath(command[0]).basename(),) + tuple(command[1:])
        self.calls.append(argv)

        failures = self._failures.get(argv)
        if failures:
            status, output = failures.pop(0)
            raise _CalledProcessError(
                returncode=status, cmd=command, output=output)

        if argv[0] == u"rbd":
            handler = getattr(self, "_rbd_" + argv[1])
            output = handler(command, *argv[2:])
        elif argv[0] == u"file":
            output = self._file(command, *argv[1:])
        elif argv[0].startswith(u"mkfs."):
            output = self._mkfs(command, argv[0][len(u"mkfs."):], *argv[1:])
        else:
            raise _CalledProcessError(
                returncode=127, cmd=command, output=b"command not found\n")
        return _ProcessResult(command=list(command), output=output, status=0)

    def _rbd_map(self, command, name):
        image = self.images.get(name)
        if image is None:
            raise _CalledProcessError(
                returncode=ENOENT, cmd=command,
                output=b"rbd: error opening image " + name.encode("utf-8") +
                b": (2) No such file or directory\n",
            )
        if image.parents > FAKE_MAX_PARENTS:
            raise _CalledProcessError(
                returncode=EINVAL, cmd=command,
                output=b"rbd: sysfs write failed\n"
                b"rbd: map failed: (22) Invalid argument\n",
            )
        device = u"/dev/rbd{}".format(self.next_device)
        self.next_device += 1
        self.mapped[device] = name
        return device.encode("utf-8") + b"\n"

    def _rbd_flatten(self, command, name):
        self.images[name].parents = 0
        return b"Image flatten: 100% complete...done.\n"

    def _rbd_unmap(self, command, device):
        if self.mapped.pop(device, None) is None:
            raise _CalledProcessError(
                returncode=EINVAL, cmd=command,
                output=b"rbd: sysfs write failed\n"
                b"rbd: unmap failed: (22) Invalid argument\n",
            )
        return b""

    def _file(self, command, flag, device):
        image = self.images[self.mapped[device]]
        if image.filesystem is None:
            description = u"{}: data\n".format(device)
        else:
            description = (
                u"{}: Linux rev 1.0 {} filesystem data, "
                u"UUID=0a1b2c3d (extents) (large files)\n".format(
                    device, image.filesystem)
            )
        return description.encode("utf-8")

    def _mkfs(self, command, filesystem, device):
        self.images[self.mapped[device]].filesystem = filesystem
        return b"Creating filesystem... done\n"
