"""
pcqnet export command - Cytoscape XGMML networks from a cluster model.

Writes one network per export pass into the output folder:

    {prefix}_cytoscape_ALL_{suffix}.xgmml
    {prefix}_cytoscape_Significants_{fdr}_{suffix}.xgmml
    {prefix}_cytoscape_{case id}-{CASE}_{suffix}.xgmml

plus ``{prefix}_export_summary_{suffix}.json`` listing written, failed and
skipped passes.

Usage:
    pcqnet export --clusters clusters.json --output networks
    pcqnet export --clusters clusters.json --config params.yaml --fdr-threshold 0.01
"""

import argparse
import logging
from pathlib import Path

from pcqnet.config import load_parameters
from pcqnet.errors import PCQError
from pcqnet.graph.annotations import AnnotationLookup
from pcqnet.io.exporter import ExportDriver
from pcqnet.io.loaders import load_cluster_model, load_protein_annotations
from pcqnet.utils.fileio import atomic_write_json

logger = logging.getLogger(__name__)


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the export subcommand."""
    parser = subparsers.add_parser(
        "export",
        help="Write Cytoscape XGMML networks",
        description=(
            "Build protein/peptide networks from a cluster model and write them as XGMML:\n"
            "the entire network, the clusters with significant peptide nodes, and one\n"
            "network per protein pair classification case."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  --config takes a YAML or JSON file with ExportParameters fields
  (conditions, collapsing flags, node styling, a 'colors' section).
  Command-line options override values from the file.

Examples:
  pcqnet export --clusters clusters.json --output networks --prefix exp1
  pcqnet export --clusters clusters.json --annotations uniprot.tsv --show-cases-in-edges
        """
    )

    parser.add_argument(
        "--clusters", "-c",
        type=Path,
        required=True,
        help="JSON cluster model"
    )

    parser.add_argument(
        "--annotations", "-a",
        type=Path,
        help="Protein annotation table (CSV/TSV with an accession column)"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="YAML/JSON export configuration"
    )

    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output folder (default: config value or current directory)"
    )

    parser.add_argument(
        "--prefix",
        help="Output file prefix (default: pcq)"
    )

    parser.add_argument(
        "--suffix",
        help="Output file suffix (default: empty)"
    )

    parser.add_argument(
        "--fdr-threshold",
        type=float,
        help="FDR threshold for significant peptide nodes (default: 0.05)"
    )

    parser.add_argument(
        "--show-cases-in-edges",
        action="store_true",
        default=None,
        help="Label edges with their inconsistent classification cases"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging"
    )

    parser.set_defaults(func=run_export)


def run_export(args: argparse.Namespace) -> int:
    """Execute the export command."""
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        params = load_parameters(
            args.config,
            output_folder=args.output,
            output_prefix=args.prefix,
            output_suffix=args.suffix,
            significant_fdr_threshold=args.fdr_threshold,
            show_cases_in_edges=args.show_cases_in_edges,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        clusters = load_cluster_model(args.clusters)
        annotations = AnnotationLookup()
        if args.annotations is not None:
            annotations = AnnotationLookup(load_protein_annotations(args.annotations))
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Cannot load input: {e}")
        return 1

    try:
        result = ExportDriver(params, annotations).export(clusters)
    except PCQError as e:
        logger.error(f"Export aborted: {e}")
        return 1

    summary_path = params.output_folder / f"{params.output_prefix}_export_summary_{params.output_suffix}.json"
    try:
        atomic_write_json(summary_path, result.to_dict())
        logger.info(f"Export summary: {summary_path}")
    except OSError as e:
        logger.error(f"Cannot write export summary {summary_path}: {e}")
        return 1

    for name, path in result.written.items():
        print(f"  {name}: {path}")
    for name, reason in result.failed.items():
        print(f"  {name}: FAILED ({reason})")

    return 0 if result.ok else 1
