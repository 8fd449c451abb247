# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Base classes for unit tests.
"""

import tempfile
from unittest import SkipTest

import testtools

from twisted.python.filepath import FilePath


class _MktempMixin(object):
    """
    ``mktemp`` support for testtools TestCases.
    """

    def mktemp(self):
        """
        Create a temporary path for use in tests.

        Provided for compatibility with Twisted's ``TestCase``.

        :return: Path to non-existent file or directory.
        """
        return self.make_temporary_path().path

    def make_temporary_path(self):
        """
        Create a temporary path for use in tests.

        :return: Path to non-existent file or directory.
        :rtype: FilePath
        """
        return self.make_temporary_directory().child('temp')

    def make_temporary_directory(self):
        """
        Create a temporary directory for use in tests.

        The directory is removed when the test finishes.

        :return: Path to directory.
        :rtype: FilePath
        """
        directory = make_temporary_directory(_path_for_test(self))
        self.addCleanup(directory.remove)
        return directory

    def make_temporary_file(self, content=b''):
        """
        Create a temporary file for use in tests.

        :param bytes content: Content to write to the file.
        :return: Path to file.
        :rtype: FilePath
        """
        path = self.make_temporary_path()
        path.setContent(content)
        return path


class TestCase(testtools.TestCase, _MktempMixin):
    """
    Base class for synchronous test cases.
    """

    # Eliot's validateLogging hard-codes a check for SkipTest when deciding
    # whether to check for valid logging, which is fair enough, since there's
    # no other API for checking whether a test has skipped. Setting
    # skipException tells testtools to treat unittest.SkipTest as the
    # exception that signals skipping.
    skipException = SkipTest


def _path_for_test_id(test_id, max_segment_length=32):
    """
    Get the temporary directory path for a test ID.

    :param str test_id: A fully-qualified Python name. Must
        have at least three components.
    :param int max_segment_length: The longest that a path segment may be.
    :return: A relative path to ``$module/$class/$method``.
    """
    if test_id.count('.') < 2:
        raise ValueError(
            "Must have at least three components (e.g. foo.bar.baz), got: %r"
            % (test_id,))
    return '/'.join(
        segment[:max_segment_length] for segment in test_id.rsplit('.', 2))


def _path_for_test(test):
    """
    Get the temporary directory path for a test.
    """
    return FilePath(tempfile.gettempdir()).preauthChild(
        _path_for_test_id(test.id()))


def make_temporary_directory(base_path):
    """
    Create a temporary directory beneath ``base_path``.

    It is the responsibility of the caller to delete the temporary directory.

    :param FilePath base_path: Base directory for the temporary directory.
        Will be created if it does not exist.
    :return: The FilePath to a newly-created temporary directory.
    """
    if not base_path.exists():
        base_path.makedirs()
    temp_dir = tempfile.mkdtemp(dir=base_path.path)
    return FilePath(temp_dir)
