#!/usr/bin/env python3
"""
Rook status CLI.

Prints the status, version and nodes of a running Rook cluster using the
same client wiring as the test suites.

Usage:
    python -m rook_harness.scripts.status
    python -m rook_harness.scripts.status --platform kubernetes --namespace rook
    python -m rook_harness.scripts.status --endpoint http://10.0.0.5:8124 --output json
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict

from rook_harness.clients import create_test_client
from rook_harness.config import load_config_from_env, load_config_from_file
from rook_harness.errors import HarnessError
from rook_harness.k8s_helper import K8sHelper
from rook_harness.platforms import PlatformType

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def collect_status(client) -> dict:
    """
    Gather status, version and nodes from a test client.

    The version is reported as None when the platform has no transport or
    the version command fails.
    """
    status = client.status()
    try:
        version = client.version()
    except HarnessError as e:
        logger.warning(f"Could not read rook version: {e}")
        version = None

    return {
        "platform": str(client.platform),
        "version": version,
        "status": {
            "overall": status.overall_status,
            "summary": status.summary_message,
            "monitors": status.monitors,
        },
        "nodes": [asdict(node) for node in client.nodes()],
    }


def print_status_text(result: dict):
    """Print status in human-readable format."""
    print("\n=== Rook Status ===\n")
    print(f"Platform: {result['platform']}")
    print(f"Version:  {result['version'] or 'unknown'}")
    print(f"Overall:  {result['status']['overall']}")
    if result["status"]["summary"]:
        print(f"Summary:  {result['status']['summary']}")

    print(f"\nNodes ({len(result['nodes'])}):")
    for node in result["nodes"]:
        print(f"  - {node['node_id']} {node['public_ip']} ({node['state']})")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Show the status of a Rook cluster"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to harness configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--platform",
        "-p",
        help="Target platform (Kubernetes or StandAlone)",
    )
    parser.add_argument(
        "--kubeconfig",
        help="Path to kubeconfig file",
    )
    parser.add_argument(
        "--namespace",
        "-n",
        help="Namespace Rook runs in",
    )
    parser.add_argument(
        "--endpoint",
        "-e",
        help="Rook management API endpoint (discovered on Kubernetes when omitted)",
    )
    parser.add_argument(
        "--output",
        "-o",
        choices=["json", "text"],
        default="text",
        help="Output format",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.config:
            config = load_config_from_file(args.config)
        else:
            config = load_config_from_env()

        if args.platform:
            config.platform = args.platform
        if args.kubeconfig:
            config.kubeconfig = args.kubeconfig
        if args.namespace:
            config.namespace = args.namespace
        if args.endpoint:
            config.rest_endpoint = args.endpoint

        platform = PlatformType.from_string(config.platform)
        k8s = None
        if platform is PlatformType.KUBERNETES:
            k8s = K8sHelper(config.namespace, config.kubeconfig, config.poll)

        client = create_test_client(platform, k8s, config)
        result = collect_status(client)

        if args.output == "json":
            print(json.dumps(result, indent=2))
        else:
            print_status_text(result)

    except Exception as e:
        logger.error(f"Status check failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
