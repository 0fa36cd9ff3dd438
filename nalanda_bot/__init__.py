"""
Nalanda Bot - Automated validation of pending working days on Nalanda.

This package logs into the Nalanda construction-site platform, finds the
days with unapproved worker time entries and validates them, returning a
summary of what was done.
"""

__version__ = '1.0.0'
__author__ = 'Nalanda Automation'

from .models import LogEntry, DaySummary, MonthReview, RunSummary
from .config import Config
from .errors import AutomationError, RunAborted
from .logging_utils import AutomationCallbacks
from .orchestrator import RunOrchestrator, run_validation

__all__ = [
    'LogEntry',
    'DaySummary',
    'MonthReview',
    'RunSummary',
    'Config',
    'AutomationError',
    'RunAborted',
    'AutomationCallbacks',
    'RunOrchestrator',
    'run_validation',
]
