# -*- coding: utf-8 -*-
"""
Exceptions raised while building a report.
"""


class ReportError(Exception):
    """The events supplied to a reporter violate the reporting protocol."""


class Abort(ReportError):
    """
    A fatal condition that stops the whole run.

    The cause has already been logged when this is raised.
    """
