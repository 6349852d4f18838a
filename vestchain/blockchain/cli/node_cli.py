import argparse
import json
import logging
import os
import sys
from uvicorn import Config, Server
from ...protocol.config.params import NETWORKS, get_network
from ...protocol.types.common import GenesisError
from ..core.chain import Blockchain
# rpc deps are globals in api.py, we need to set them.
from ..rpc import api

logger = logging.getLogger(__name__)

# Devnet sample: a founder vesting over 100 blocks and a treasury funding vested transfers.
SAMPLE_GENESIS = {
    "alloc": {
        "founder": 1_000_000,
        "treasury": 10_000_000,
    },
    "vesting": [
        ["founder", 0, 100, 200_000],
    ],
}


def cmd_init(args):
    """Initialize node data dir with a sample genesis.json."""
    data_dir = args.datadir
    os.makedirs(data_dir, exist_ok=True)

    genesis_path = os.path.join(data_dir, "genesis.json")
    if os.path.exists(genesis_path):
        print(f"Genesis already exists at {genesis_path}")
        return

    with open(genesis_path, "w") as f:
        f.write(json.dumps(SAMPLE_GENESIS, indent=2))
    print(f"Wrote sample genesis to {genesis_path}")
    print(f"\nNode initialized in {data_dir}")


def cmd_start(args):
    data_dir = args.datadir
    db_path = os.path.join(data_dir, "chain.db")

    print("Starting VestChain node...")
    print(f"Data DB: {db_path}")
    print(f"RPC: {args.host}:{args.port}")

    try:
        chain = Blockchain(db_path, config=get_network(args.network))
    except GenesisError as e:
        logger.critical(f"Cannot start node: {e}")
        sys.exit(1)

    api.chain = chain
    server = Server(Config(api.app, host=args.host, port=args.port, log_level=args.log_level.lower()))
    try:
        server.run()
    finally:
        chain.close()


def main():
    parser = argparse.ArgumentParser(prog="vestchain-node", description="VestChain Node")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_init = subparsers.add_parser("init", help="Initialize data dir")
    p_init.add_argument("--datadir", default="./data", help="Node data directory")
    p_init.set_defaults(func=cmd_init)

    p_start = subparsers.add_parser("start", help="Start node RPC")
    p_start.add_argument("--datadir", default="./data", help="Node data directory")
    p_start.add_argument("--host", default="127.0.0.1")
    p_start.add_argument("--port", type=int, default=8000)
    p_start.add_argument("--network", default="devnet", choices=sorted(NETWORKS))
    p_start.set_defaults(func=cmd_start)

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
