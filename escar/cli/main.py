#!/usr/bin/env python3
# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""escar CLI.

Command-line interface for registering a node and serving its identity.

Usage:
    escar register --db /var/lib/escar/instances.db --live i-001,i-002
    escar list --db /var/lib/escar/instances.db
    escar serve --db /var/lib/escar/instances.db --live i-001 --port 8080

    Or with Python:
    python -m escar.cli.main register ...

Environment Variables:
    ESCAR_APP_NAME, ESCAR_DC, ESCAR_INSTANCE_ID, ESCAR_HOSTNAME,
    ESCAR_HOST_IP, ESCAR_RACK, ESCAR_ASG_NAME, ESCAR_TRIBE_ENABLED,
    ESCAR_TRIBE_CLUSTERS, ESCAR_DEDICATED_DEPLOYMENT, ESCAR_DEBUG
    ESCAR_DB_PATH=./escar-instances.db
    ESCAR_LIVE_MEMBERS=i-001,i-002
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import os
import sys
from typing import List, Optional

from escar.config import NodeConfig, split_csv
from escar.exceptions import EscarError
from escar.identity.coordinator import InstanceCoordinator
from escar.identity.directory import SQLiteDirectory
from escar.identity.instance import instances_to_json
from escar.identity.membership import StaticMembership
from escar.utils.logger import logger, setup_logger


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        default=os.environ.get("ESCAR_DB_PATH", "./escar-instances.db"),
        help="SQLite instance directory (default: ./escar-instances.db)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("ESCAR_LOG_LEVEL", "info"),
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: info)",
    )
    parser.add_argument("--app-name", help="Override ESCAR_APP_NAME")
    parser.add_argument("--dc", help="Override ESCAR_DC")
    parser.add_argument("--instance-id", help="Override ESCAR_INSTANCE_ID")
    parser.add_argument("--hostname", help="Override ESCAR_HOSTNAME")
    parser.add_argument("--host-ip", help="Override ESCAR_HOST_IP")
    parser.add_argument("--rack", help="Override ESCAR_RACK")
    parser.add_argument("--asg", help="Override ESCAR_ASG_NAME")
    parser.add_argument(
        "--tribe-clusters",
        help="Comma-separated tribe cluster names, enables tribe mode",
    )


def _add_live_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--live",
        default=os.environ.get("ESCAR_LIVE_MEMBERS", ""),
        help="Comma-separated instance ids alive in this rack",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the escar command."""
    parser = argparse.ArgumentParser(
        prog="escar",
        description="Register this node in the shared instance directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  escar register --live i-001,i-002      # Sweep dead peers, register this node
  escar list                             # Print every instance of the cluster
  escar serve --port 8080                # Register, then serve the REST API
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Run the startup protocol")
    _add_common_arguments(register)
    _add_live_argument(register)

    listing = subparsers.add_parser("list", help="List cluster instances")
    _add_common_arguments(listing)

    serve = subparsers.add_parser("serve", help="Register and serve the REST API")
    _add_common_arguments(serve)
    _add_live_argument(serve)
    serve.add_argument(
        "--host",
        default=os.environ.get("ESCAR_HOST", "0.0.0.0"),
        help="Host to bind to (default: 0.0.0.0)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("ESCAR_PORT", "8080")),
        help="Port to bind to (default: 8080)",
    )

    return parser


def load_config(args: argparse.Namespace) -> NodeConfig:
    """Build the node configuration from the environment and CLI overrides."""
    config = NodeConfig.from_env()
    overrides = {
        "app_name": args.app_name,
        "datacenter": args.dc,
        "instance_id": args.instance_id,
        "hostname": args.hostname,
        "host_ip": args.host_ip,
        "rack": args.rack,
        "asg_name": args.asg,
    }
    changes = {k: v for k, v in overrides.items() if v is not None}
    if args.tribe_clusters:
        changes["tribe_mode_enabled"] = True
        changes["tribe_cluster_names"] = split_csv(args.tribe_clusters)
    return dataclasses.replace(config, **changes)


def _start_coordinator(args: argparse.Namespace, config: NodeConfig) -> InstanceCoordinator:
    membership = StaticMembership(split_csv(args.live))
    return InstanceCoordinator.start(config, SQLiteDirectory(args.db), membership)


def _serve(coordinator: InstanceCoordinator, args: argparse.Namespace) -> None:
    # Import uvicorn here so register/list work without the server stack
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is not installed. Install it with:")
        print("  pip install uvicorn")
        sys.exit(1)

    from escar.service.app import create_app

    print(f"  Instance:  {coordinator.get_instance().id}")
    print(f"  Master:    {coordinator.is_master()}")
    print(f"  Health:    http://{args.host}:{args.port}/health")
    print()

    uvicorn.run(
        create_app(coordinator),
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the escar command."""
    args = build_parser().parse_args(argv)
    # stdout carries the JSON output of register and list
    setup_logger(level=args.log_level, stream=sys.stderr)

    config = load_config(args)
    errors = config.validate() if args.command != "list" else []
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        if args.command == "list":
            coordinator = InstanceCoordinator(
                config, SQLiteDirectory(args.db), StaticMembership()
            )
            print(json.dumps(instances_to_json(coordinator.get_all_instances()), indent=2))
            return 0

        coordinator = _start_coordinator(args, config)
    except EscarError as e:
        logger.error(f"escar {args.command} failed: {e}")
        return 1

    if args.command == "register":
        print(coordinator.get_instance().model_dump_json(indent=2))
        return 0

    _serve(coordinator, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
