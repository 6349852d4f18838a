# MIT License
# Copyright (c) 2025 Hashborn

"""
VestChain: linear vesting schedules with an enforced balance lock.
"""

__version__ = "0.1.0"
