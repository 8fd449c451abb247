# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
rbdvolume attaches, detaches and formats Ceph RBD images on behalf of a host
volume-orchestration framework.
"""

__version__ = "0.1.0"


def _redirect_eliot_logs_for_trial():
    """
    Enable Eliot logging to the ``_trial/test.log`` file.
    """
    import os
    import sys
    if os.path.basename(sys.argv[0]) == "trial":
        from eliot.twisted import redirectLogsForTrial
        redirectLogsForTrial()
_redirect_eliot_logs_for_trial()
del _redirect_eliot_logs_for_trial
