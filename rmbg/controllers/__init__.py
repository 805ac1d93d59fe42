"""
Controllers package for handling application logic flow
"""

from .partition import partition
from .pipeline import run_one, run_batch, remove_backgrounds, ProcessResult, ProcessStatus
from .cli import main

__all__ = [
    'partition', 'run_one', 'run_batch', 'remove_backgrounds',
    'ProcessResult', 'ProcessStatus', 'main'
]
