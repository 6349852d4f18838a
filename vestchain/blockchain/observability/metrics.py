# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics Exporter

Exports vesting metrics in Prometheus format.

Metrics:
- Operations executed, by operation and outcome
- Events published
- Current block number
- Vesting accounts and total amount locked by vesting
"""

from prometheus_client import Counter, Gauge, CollectorRegistry

# Create registry for metrics
metrics_registry = CollectorRegistry()

# ═══════════════════════════════════════════════════════════════════
# OPERATION METRICS
# ═══════════════════════════════════════════════════════════════════

operations_total = Counter(
    'vestchain_operations_total',
    'Total number of vesting operations executed',
    ['operation', 'status'],
    registry=metrics_registry
)

events_total = Counter(
    'vestchain_events_total',
    'Total number of events published',
    ['event'],
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# STATE METRICS
# ═══════════════════════════════════════════════════════════════════

block_number = Gauge(
    'vestchain_block_number',
    'Current block number',
    registry=metrics_registry
)

vesting_accounts = Gauge(
    'vestchain_vesting_accounts',
    'Number of accounts with at least one vesting schedule',
    registry=metrics_registry
)

locked_total = Gauge(
    'vestchain_locked_total',
    'Sum over all accounts of the amount still locked by vesting at the current block',
    registry=metrics_registry
)


# ═══════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════

def record_operation(operation: str, status: str):
    """
    Count an executed operation.

    Args:
        operation: Operation name (e.g., 'vest', 'merge_schedules')
        status: 'ok' or the error code it failed with
    """
    operations_total.labels(operation=operation, status=status).inc()


def update_metrics(chain):
    """
    Update gauges from chain state. Called when metrics are scraped.

    Args:
        chain: Blockchain instance
    """
    block_number.set(chain.block_number)

    all_vesting = chain.state.get_all_vesting()
    vesting_accounts.set(len(all_vesting))

    total = 0
    for schedules in all_vesting.values():
        total += sum(s.locked_at(chain.block_number) for s in schedules)
    locked_total.set(total)
