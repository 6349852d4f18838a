# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import sys
import json
import requests
import os

DEFAULT_NODE = "http://localhost:8000"


def get_node_url(args):
    return args.node or os.environ.get("VESTCHAIN_NODE", DEFAULT_NODE)


def _get(url):
    try:
        resp = requests.get(url)
    except requests.RequestException as e:
        print(f"Connection error: {e}")
        sys.exit(1)
    if resp.status_code != 200:
        print(f"Error: {resp.text}")
        sys.exit(1)
    return resp.json()


def _post(url, payload):
    try:
        resp = requests.post(url, json=payload)
    except requests.RequestException as e:
        print(f"Connection error: {e}")
        sys.exit(1)
    if resp.status_code != 200:
        print(f"Error: {resp.text}")
        sys.exit(1)
    return resp.json()


# --- Query Commands ---
def cmd_query_status(args):
    print(json.dumps(_get(f"{get_node_url(args)}/status"), indent=2))


def cmd_query_account(args):
    data = _get(f"{get_node_url(args)}/account/{args.address}")
    print(f"Balance: {data['balance']}")
    print(f"Usable:  {data['usable_balance']}")
    for lock_id, amount in data['locks'].items():
        print(f"Lock {lock_id!r}: {amount}")


def cmd_query_vesting(args):
    data = _get(f"{get_node_url(args)}/vesting/{args.address}")
    if data['vesting'] is None:
        print(f"{args.address} is not vesting.")
        return

    print(f"Vesting balance: {data['vesting_balance']}")
    print(f"{'#':<4} {'Locked':<20} {'Per block':<20} {'Start':<12} {'End':<12}")
    print("-" * 70)
    for i, s in enumerate(data['vesting']):
        end = s['ending_block'] if s['ending_block'] is not None else "-"
        print(f"{i:<4} {s['locked']:<20} {s['per_block']:<20} {s['starting_block']:<12} {end:<12}")


# --- Tx Commands ---
def cmd_tx_vest(args):
    res = _post(f"{get_node_url(args)}/vest", {"address": args.address})
    print(f"Vested at block {res['block_number']}")


def cmd_tx_vest_other(args):
    res = _post(f"{get_node_url(args)}/vest_other", {"address": args.target})
    print(f"Vested {args.target} at block {res['block_number']}")


def cmd_tx_vested_transfer(args):
    payload = {
        "source": args.source,
        "target": args.target,
        "schedule": {
            "locked": args.locked,
            "per_block": args.per_block,
            "starting_block": args.starting_block,
        },
    }
    res = _post(f"{get_node_url(args)}/vested_transfer", payload)
    print(f"Vested transfer to {args.target} added at block {res['block_number']}")


def cmd_tx_merge(args):
    payload = {
        "address": args.address,
        "schedule1_index": args.index1,
        "schedule2_index": args.index2,
    }
    res = _post(f"{get_node_url(args)}/merge_schedules", payload)
    print(f"Merged schedules at block {res['block_number']}")


# --- Dev Commands ---
def cmd_dev_advance(args):
    res = _post(f"{get_node_url(args)}/blocks/advance", {"blocks": args.blocks})
    print(f"Block number: {res['block_number']}")


def build_parser():
    parser = argparse.ArgumentParser(prog="vestchain-cli", description="VestChain Client CLI")
    parser.add_argument("--node", help="Node URL (default: http://localhost:8000)")

    subparsers = parser.add_subparsers(dest="command", help="Sub-commands")

    # query
    p_query = subparsers.add_parser("query", help="Query chain state")
    sp_query = p_query.add_subparsers(dest="subcommand")

    sp_query.add_parser("status", help="Node status").set_defaults(func=cmd_query_status)

    pq_acc = sp_query.add_parser("account", help="Get account balance and locks")
    pq_acc.add_argument("address", help="Account address")
    pq_acc.set_defaults(func=cmd_query_account)

    pq_vest = sp_query.add_parser("vesting", help="Get vesting schedules")
    pq_vest.add_argument("address", help="Account address")
    pq_vest.set_defaults(func=cmd_query_vesting)

    # tx
    p_tx = subparsers.add_parser("tx", help="Send vesting calls")
    sp_tx = p_tx.add_subparsers(dest="subcommand")

    pt_vest = sp_tx.add_parser("vest", help="Unlock vested funds")
    pt_vest.add_argument("address", help="Vesting account")
    pt_vest.set_defaults(func=cmd_tx_vest)

    pt_vest_other = sp_tx.add_parser("vest-other", help="Unlock vested funds of another account")
    pt_vest_other.add_argument("target", help="Vesting account")
    pt_vest_other.set_defaults(func=cmd_tx_vest_other)

    pt_vt = sp_tx.add_parser("vested-transfer", help="Transfer funds under a vesting schedule")
    pt_vt.add_argument("target", help="Recipient address")
    pt_vt.add_argument("--from", dest="source", required=True, help="Sender address")
    pt_vt.add_argument("--locked", type=int, required=True, help="Amount to lock")
    pt_vt.add_argument("--per-block", type=int, required=True, help="Amount unlocked per block")
    pt_vt.add_argument("--starting-block", type=int, required=True, help="Block unlocking starts at")
    pt_vt.set_defaults(func=cmd_tx_vested_transfer)

    pt_merge = sp_tx.add_parser("merge", help="Merge two vesting schedules")
    pt_merge.add_argument("address", help="Vesting account")
    pt_merge.add_argument("index1", type=int, help="Index of the first schedule")
    pt_merge.add_argument("index2", type=int, help="Index of the second schedule")
    pt_merge.set_defaults(func=cmd_tx_merge)

    # dev
    p_dev = subparsers.add_parser("dev", help="Devnet helpers")
    sp_dev = p_dev.add_subparsers(dest="subcommand")

    pd_adv = sp_dev.add_parser("advance", help="Advance the block number")
    pd_adv.add_argument("blocks", type=int, nargs="?", default=1, help="Number of blocks")
    pd_adv.set_defaults(func=cmd_dev_advance)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
