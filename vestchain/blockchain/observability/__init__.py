# MIT License
# Copyright (c) 2025 Hashborn

"""
Observability: Prometheus metrics for the vesting node.
"""

from .metrics import metrics_registry, record_operation, update_metrics

__all__ = ["metrics_registry", "record_operation", "update_metrics"]
