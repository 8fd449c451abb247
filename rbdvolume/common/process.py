# -*- test-case-name: rbdvolume.common.test.test_process -*-
# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
Subprocess utilities.
"""
from subprocess import PIPE, STDOUT, CalledProcessError, Popen

from eliot import log_message, start_action
from pyrsistent import PClass, field

from twisted.python.procutils import which


class _CalledProcessError(CalledProcessError):
    """
    Just like ``CalledProcessError`` except output is included in the string
    representation.
    """
    def __str__(self):
        base = super(_CalledProcessError, self).__str__()
        output = self.output.decode("utf-8", "replace")
        lines = "\n".join("    |" + line for line in output.splitlines())
        return base + " and output:\n" + lines


class _ProcessResult(PClass):
    """
    The return type for ``run_process`` representing the outcome of the process
    that was run.
    """
    command = field(type=list, mandatory=True)
    output = field(type=bytes, mandatory=True)
    status = field(type=int, mandatory=True)

    def text(self):
        """
        :return: The combined output decoded as UTF-8, with undecodable bytes
            replaced.
        """
        return self.output.decode("utf-8", "replace")


def run_process(command, *args, **kwargs):
    """
    Run a child process, capturing its stdout and stderr.

    :param list command: An argument list to use to launch the child process.

    :raise CalledProcessError: If the child process has a non-zero exit status.

    :return: A ``_ProcessResult`` instance describing the result of the child
         process.
    """
    kwargs["stdout"] = PIPE
    kwargs["stderr"] = STDOUT
    action = start_action(
        action_type="run_process", command=command, args=args,
        kwargs={key: repr(value) for key, value in kwargs.items()})
    with action:
        process = Popen(command, *args, **kwargs)
        with process.stdout:
            output = process.stdout.read()
        status = process.wait()
        result = _ProcessResult(command=command, output=output, status=status)
        log_message(
            message_type=u"run_process:result",
            command=result.command,
            output=result.text(),
            status=result.status,
        )
        if result.status:
            raise _CalledProcessError(
                returncode=status, cmd=command, output=output,
            )
    return result


def find_executable(name):
    """
    Locate an executable on the search path of this process.

    :param str name: The name of the executable, e.g. ``"rbd"``.

    :return: The path of the first match on ``PATH``, or ``None`` if there is
        no executable of that name.
    """
    matches = which(name)
    if not matches:
        return None
    return matches[0]
