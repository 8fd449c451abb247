# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""Tests for :module:`rbdvolume.common.script`."""

import json
import sys

from eliot import log_message
from twisted.python import usage
from zope.interface import implementer

from ..script import standard_options, ScriptRunner, ICommandLineScript
from ...testtools import (
    TestCase, FakeSysModule, StandardOptionsTestsMixin,
)


class ScriptRunnerInitTests(TestCase):
    """Tests for :py:meth:`ScriptRunner.__init__`."""

    def test_sys_default(self):
        """
        `ScriptRunner.sys` is `sys` by default.
        """
        self.assertIs(
            sys,
            ScriptRunner(script=None, options=None).sys_module
        )

    def test_sys_override(self):
        """
        `ScriptRunner.sys` can be overridden in the constructor.
        """
        dummySys = object()
        self.assertIs(
            dummySys,
            ScriptRunner(script=None, options=None,
                         sys_module=dummySys).sys_module
        )


class ScriptRunnerParseOptionsTests(TestCase):
    """Tests for :py:meth:`ScriptRunner._parse_options`."""

    def test_parse_options(self):
        """
        ``ScriptRunner._parse_options`` accepts a list of arguments,
        passes them to the `parseOptions` method of its ``options`` attribute
        and returns the populated options instance.
        """
        class OptionsSpy(usage.Options):
            def parseOptions(self, arguments):
                self.parseOptionsArguments = arguments

        expectedArguments = [object(), object()]
        runner = ScriptRunner(script=None, options=OptionsSpy())
        options = runner._parse_options(expectedArguments)
        self.assertEqual(expectedArguments, options.parseOptionsArguments)

    def test_parse_options_usage_error(self):
        """
        `ScriptRunner._parse_options` catches `usage.UsageError`
        exceptions and writes the help text and an error message to `stderr`
        before exiting with status 1.
        """
        expectedMessage = 'foo bar baz'
        expectedCommandName = 'test_command'

        class FakeOptions(usage.Options):
            synopsis = 'Usage: %s [options]' % (expectedCommandName,)

            def parseOptions(self, arguments):
                raise usage.UsageError(expectedMessage)

        fake_sys = FakeSysModule()

        runner = ScriptRunner(script=None, options=FakeOptions(),
                              sys_module=fake_sys)
        error = self.assertRaises(SystemExit, runner._parse_options, [])
        expectedErrorMessage = 'ERROR: %s\n' % (expectedMessage,)
        errorText = fake_sys.stderr.getvalue()
        self.assertEqual(
            (1, True, expectedErrorMessage),
            (error.code,
             errorText.startswith('Usage: test_command'),
             errorText[-len(expectedErrorMessage):])
        )


@implementer(ICommandLineScript)
class SpyScript(object):
    """
    A script which records the options it was run with and returns a
    configurable status.
    """
    def __init__(self, result=None, exception=None):
        self.result = result
        self.exception = exception

    def main(self, options):
        self.options = options
        log_message(message_type=u"spy:main")
        if self.exception is not None:
            raise self.exception
        return self.result


class ScriptRunnerMainTests(TestCase):
    """Tests for :py:meth:`ScriptRunner.main`."""

    def run_script(self, script, argv=(), options=None, logging=False):
        """
        Run ``script`` with a ``ScriptRunner`` and a fake ``sys`` module.

        :return: A tuple of the ``SystemExit`` raised and the fake ``sys``
            module.
        """
        if options is None:
            options = usage.Options()
        fake_sys = FakeSysModule(argv=["rbdvolume-test"] + list(argv))
        runner = ScriptRunner(script, options, sys_module=fake_sys,
                              logging=logging)
        error = self.assertRaises(SystemExit, runner.main)
        return error, fake_sys

    def test_main_uses_sysargv(self):
        """
        ``ScriptRunner.main`` uses ``self.sys_module.argv``.
        """
        class SpyOptions(usage.Options):
            def opt_hello(self, value):
                self.value = value

        script = SpyScript()
        self.run_script(script, argv=["--hello", "world"],
                        options=SpyOptions())
        self.assertEqual("world", script.options.value)

    def test_success(self):
        """
        A script returning ``None`` exits with status 0.
        """
        error, _ = self.run_script(SpyScript())
        self.assertEqual(0, error.code)

    def test_status(self):
        """
        The status returned by the script becomes the exit status.
        """
        error, _ = self.run_script(SpyScript(result=2))
        self.assertEqual(2, error.code)

    def test_script_usage_error(self):
        """
        A ``UsageError`` raised by the script is reported like one raised
        while parsing options.
        """
        error, fake_sys = self.run_script(
            SpyScript(exception=usage.UsageError("no such driver")))
        self.assertEqual(
            (1, True),
            (error.code,
             fake_sys.stderr.getvalue().endswith("ERROR: no such driver\n")),
        )

    def test_unexpected_error(self):
        """
        Other exceptions raised by the script propagate.
        """
        class Broken(Exception):
            pass

        fake_sys = FakeSysModule(argv=["rbdvolume-test"])
        runner = ScriptRunner(SpyScript(exception=Broken()), usage.Options(),
                              sys_module=fake_sys, logging=False)
        self.assertRaises(Broken, runner.main)

    def test_disabled_logging(self):
        """
        If ``logging`` is set to ``False``, ``ScriptRunner.main``
        does not log to ``sys.stdout``.
        """
        _, fake_sys = self.run_script(SpyScript())
        self.assertEqual(u"", fake_sys.stdout.getvalue())

    def test_logging(self):
        """
        If ``logging`` is ``True``, Eliot messages are written to the logfile
        while the script runs.
        """
        @standard_options
        class Options(usage.Options):
            pass

        fake_sys = FakeSysModule(argv=["rbdvolume-test"])
        runner = ScriptRunner(SpyScript(), Options(sys_module=fake_sys),
                              sys_module=fake_sys, logging=True)
        self.assertRaises(SystemExit, runner.main)
        messages = [
            json.loads(line)
            for line in fake_sys.stdout.getvalue().splitlines()
        ]
        self.assertIn(
            u"spy:main",
            [message.get(u"message_type") for message in messages],
        )


@standard_options
class TestOptions(usage.Options):
    """An unmodified ``usage.Options`` subclass for use in testing."""


class StandardOptionsTests(StandardOptionsTestsMixin, TestCase):
    """Tests for ``standard_options``

    Using a decorating an unmodified ``usage.Options`` subclass.
    """
    options = TestOptions
