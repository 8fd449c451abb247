# Copyright ClusterHQ Inc.  See LICENSE file for details.
"""
Tests for ``rbdvolume.common.process``.
"""
from subprocess import CalledProcessError
import os
import stat
import sys

from fixtures import EnvironmentVariable
from pyrsistent import PClass, field
from twisted.python.filepath import FilePath

from ...testtools import TestCase, random_name
from ..process import run_process, find_executable, _ProcessResult

FAKE_TOOL_FILE = FilePath(__file__).sibling('fake_tool.py')


class FakeTool(PClass):
    """
    The parameters which will be supplied when calling ``FAKE_TOOL_FILE``
    in tests.
    """
    returncode = field(type=int)
    stdout = field(type=str)
    stderr = field(type=str)

    def commandline(self):
        """
        :returns: A ``list`` suitable for passing to ``run_process`` in tests.
        """
        return [
            sys.executable,
            FAKE_TOOL_FILE.path,
            "--returncode", str(self.returncode),
            "--stdout", self.stdout,
            "--stderr", self.stderr,
        ]

    def output(self):
        """
        :returns: The combined output the script is expected to produce.
        """
        return (self.stdout + self.stderr).encode("utf-8")


class RunProcessTests(TestCase):
    """
    Tests for ``run_process``.
    """
    def command_for_test(self, returncode):
        """
        Construct a ``FakeTool`` which generates a command line for
        ``FAKE_TOOL_FILE`` with test case specific stdout and stderr and
        the supplied ``returncode``.
        """
        return FakeTool(
            returncode=returncode,
            stdout=random_name(self),
            stderr=random_name(self),
        )

    def test_success(self):
        """
        ``run_process`` returns a `__ProcessResult`` object with the status,
        command and combined stdout and stderr if the exit status is 0.
        """
        command = self.command_for_test(returncode=0)
        result = run_process(command.commandline())
        self.assertEqual(
            _ProcessResult(
                command=command.commandline(),
                status=command.returncode,
                output=command.output(),
            ),
            result
        )

    def test_text(self):
        """
        ``_ProcessResult.text`` decodes the output, replacing anything which
        isn't UTF-8.
        """
        result = _ProcessResult(
            command=[u"rbd"], status=0, output=b"/dev/rbd0\xff\n")
        self.assertEqual(u"/dev/rbd0\ufffd\n", result.text())

    def check_run_process_error(self, expected_returncode):
        """
        Run ``FAKE_TOOL_FILE`` with ``run_process`` and assert that
        ``CalledProcessError`` is raised.
        """
        command = self.command_for_test(returncode=expected_returncode)
        e = self.assertRaises(
            CalledProcessError,
            run_process,
            command.commandline()
        )
        self.assertEqual(
            (command.commandline(),
             command.returncode,
             command.output()),
            (e.cmd, e.returncode, e.output)
        )
        self.assertIn(command.stdout + command.stderr, str(e))

    def test_error(self):
        """
        ``run_process`` raises CalledProcessError when status !=0.
        The string representation of the raised error includes the combined
        stdout and stderr.
        """
        self.check_run_process_error(expected_returncode=1)

    def test_error_einval(self):
        """
        The exit status of the child is available as ``returncode``, so that
        callers can react to particular failures such as EINVAL.
        """
        self.check_run_process_error(expected_returncode=22)

    def test_error_signal(self):
        """
        ``run_process`` raises CalledProcessError when it exits due to a signal
        and the signal is included in the exception.
        """
        self.check_run_process_error(expected_returncode=-1)

    def test_missing_executable(self):
        """
        ``run_process`` raises ``OSError`` if the executable does not exist.
        """
        missing = self.make_temporary_directory().child(u"missing").path
        self.assertRaises(OSError, run_process, [missing])


class FindExecutableTests(TestCase):
    """
    Tests for ``find_executable``.
    """
    def setUp(self):
        super(FindExecutableTests, self).setUp()
        self.first = self.make_temporary_directory()
        self.second = self.make_temporary_directory()
        self.useFixture(EnvironmentVariable(
            "PATH", os.pathsep.join([self.first.path, self.second.path])))

    def make_executable(self, directory, name):
        """
        Create an executable file called ``name`` in ``directory``.
        """
        path = directory.child(name)
        path.setContent(b"#!/bin/sh\n")
        path.chmod(stat.S_IRWXU)
        return path

    def test_found(self):
        """
        The path of an executable on ``PATH`` is returned.
        """
        path = self.make_executable(self.second, u"rbd")
        self.assertEqual(path.path, find_executable(u"rbd"))

    def test_first_match(self):
        """
        If several directories on ``PATH`` contain the executable, the first
        one wins.
        """
        path = self.make_executable(self.first, u"mkfs.ext4")
        self.make_executable(self.second, u"mkfs.ext4")
        self.assertEqual(path.path, find_executable(u"mkfs.ext4"))

    def test_not_found(self):
        """
        ``None`` is returned if the executable is not on ``PATH``.
        """
        self.assertIs(None, find_executable(u"rbd"))

    def test_not_executable(self):
        """
        Files without execute permission are not considered.
        """
        self.second.child(u"file").setContent(b"")
        self.assertIs(None, find_executable(u"file"))
