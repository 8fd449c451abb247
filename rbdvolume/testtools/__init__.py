# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Various utilities to help with unit and functional testing.
"""

import io
import sys
from random import randrange

from .. import __version__
from ._base import TestCase, make_temporary_directory

__all__ = [
    'TestCase', 'make_temporary_directory', 'random_name',
    'FakeSysModule', 'StandardOptionsTestsMixin',
]


def random_name(case):
    """
    Return a short, random name.

    :param TestCase case: The test case being run.  The test method that is
        running will be mixed into the name.

    :return name: A random ``unicode`` name.
    """
    return u"{}-{}".format(case.id().replace(u".", u"_"), randrange(10 ** 6))


class FakeSysModule(object):
    """A ``sys`` like substitute.

    For use in testing the handling of `argv`, `stdout` and `stderr` by command
    line scripts.

    :ivar list argv: See ``__init__``
    :ivar stdout: A :py:class:`io.StringIO` object representing standard
        output.
    :ivar stderr: A :py:class:`io.StringIO` object representing standard
        error.
    """
    def __init__(self, argv=None):
        """Initialise the fake sys module.

        :param list argv: The arguments list which should be exposed as
            ``sys.argv``.
        """
        if argv is None:
            argv = []
        self.argv = argv
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()


class StandardOptionsTestsMixin(object):
    """Tests for classes decorated with ``standard_options``.

    Tests for the standard options that should be available on every rbdvolume
    command.

    :ivar usage.Options options: The ``usage.Options`` class under test.
    """
    options = None

    def test_sys_module_default(self):
        """
        ``standard_options`` adds a ``_sys_module`` attribute which is
        ``sys`` by default.
        """
        self.assertIs(sys, self.options()._sys_module)

    def test_sys_module_override(self):
        """
        ``standard_options`` adds a ``sys_module`` argument to the
        initialiser which is assigned to ``_sys_module``.
        """
        fake_sys_module = FakeSysModule()
        self.assertIs(
            fake_sys_module,
            self.options(sys_module=fake_sys_module)._sys_module
        )

    def test_version(self):
        """
        rbdvolume commands have a `--version` option which prints the current
        version string to stdout and causes the command to exit with status
        `0`.
        """
        sys = FakeSysModule()
        error = self.assertRaises(
            SystemExit,
            self.options(sys_module=sys).parseOptions,
            ['--version']
        )
        self.assertEqual(
            (__version__ + '\n', 0),
            (sys.stdout.getvalue(), error.code)
        )

    def test_verbosity_default(self):
        """
        rbdvolume commands have `verbosity` of `0` by default.
        """
        options = self.options()
        self.assertEqual(0, options['verbosity'])

    def test_verbosity_option(self):
        """
        rbdvolume commands have a `--verbose` option which increments the
        configured verbosity by `1`.
        """
        options = self.options()
        # The command may otherwise give a UsageError if arguments or a
        # sub-command are required.
        self.patch(options, "parseArgs", lambda: None)
        self.patch(options, "postOptions", lambda: None)
        options.parseOptions(['--verbose'])
        self.assertEqual(1, options['verbosity'])

    def test_verbosity_option_short(self):
        """
        rbdvolume commands have a `-v` option which increments the configured
        verbosity by 1.
        """
        options = self.options()
        self.patch(options, "parseArgs", lambda: None)
        self.patch(options, "postOptions", lambda: None)
        options.parseOptions(['-v'])
        self.assertEqual(1, options['verbosity'])

    def test_logfile_default(self):
        """
        rbdvolume commands log to the standard output of the ``sys`` module
        by default.
        """
        sys = FakeSysModule()
        options = self.options(sys_module=sys)
        self.assertIs(sys.stdout, options['logfile'])

    def test_logfile_option(self):
        """
        rbdvolume commands have a `--logfile` option which creates the
        directory of the logfile if necessary.
        """
        logfile = self.make_temporary_directory().child(
            'logs').child('driver.log')
        options = self.options()
        self.patch(options, "parseArgs", lambda: None)
        self.patch(options, "postOptions", lambda: None)
        options.parseOptions(['--logfile', logfile.path])
        self.addCleanup(options['logfile'].close)
        self.assertEqual(
            (True, logfile.path),
            (logfile.parent().isdir(), options['logfile'].path),
        )
