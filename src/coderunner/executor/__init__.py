"""
Process execution for the code runner.

This package exposes the :class:`ProcessRunner`, which spawns a single
compiler or interpreter process, feeds it standard input, drains both of
its output streams concurrently and kills it when it overruns its
wall‑clock bound.  The pipeline calls it once per compile step, once per
execute step and once per version lookup.
"""

from .runner import ProcessOutcome, ProcessRunner, StreamDrain

__all__ = [
    "ProcessOutcome",
    "ProcessRunner",
    "StreamDrain",
]
