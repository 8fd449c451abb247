# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
A stand-in for the external tools (``rbd``, ``file``, ``mkfs.*``) run by
``run_process`` in the ``test_process`` module.

It writes the text given with ``--stdout`` and ``--stderr`` and exits with
``--returncode``.  A negative returncode makes the tool kill itself with that
signal instead, like a tool interrupted by the operator.
"""

import os
import sys
import time

from twisted.python.usage import Options


class FakeToolOptions(Options):
    optParameters = [
        ["returncode", None, 0, "Exit with this status", int],
        ["stdout", None, "", "Print this to stdout"],
        ["stderr", None, "", "Print this to stderr"],
    ]


def run(options, stdout, stderr):
    """
    Produce the output requested by ``options``.

    :return: The status to exit with.
    """
    stdout.write(options["stdout"])
    stdout.flush()
    stderr.write(options["stderr"])
    stderr.flush()
    if options["returncode"] < 0:
        os.kill(os.getpid(), -options["returncode"])
        # Wait for the signal to be delivered.
        time.sleep(10)
    return options["returncode"]


if __name__ == "__main__":
    options = FakeToolOptions()
    options.parseOptions(sys.argv[1:])
    raise SystemExit(run(options, sys.stdout, sys.stderr))
