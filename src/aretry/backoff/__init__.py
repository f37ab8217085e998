r"""Backoff policies for computing the delay between attempts.

This package provides fixed and exponential backoff policies. Delays are
expressed in milliseconds.
"""

from __future__ import annotations

__all__ = ["BaseBackoffPolicy", "ExponentialBackoff", "FixedBackoff"]

from aretry.backoff.base import BaseBackoffPolicy
from aretry.backoff.exponential import ExponentialBackoff
from aretry.backoff.fixed import FixedBackoff
