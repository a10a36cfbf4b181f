"""
pcqnet CLI - Command-line interface for protein cluster network export.

Commands:
    pcqnet export      - Write Cytoscape XGMML networks from a cluster model
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for pcqnet."""
    parser = argparse.ArgumentParser(
        prog="pcqnet",
        description="Protein cluster network export for Cytoscape",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  export        Write XGMML networks (all, significant, per classification case)

Examples:
  pcqnet export --clusters clusters.json --output networks
  pcqnet export --clusters clusters.json --annotations uniprot.tsv --config params.yaml
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from pcqnet.cli import export
    export.register_parser(subparsers)

    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
