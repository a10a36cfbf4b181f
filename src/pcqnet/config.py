"""
Export configuration.

Supports YAML and JSON config files; the CLI overrides individual values.
Every export pass reads the same ``ExportParameters`` instance; nothing in
here is mutated once an export has started.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import matplotlib.colors as mcolors
import yaml

__all__ = [
    'ProteinNodeLabel',
    'NodeShape',
    'ColorConfig',
    'ExportParameters',
    'normalize_color',
    'load_config',
    'parameters_from_dict',
    'load_parameters',
]


class ProteinNodeLabel(Enum):
    """What protein nodes show as their label."""
    ACC = "ACC"
    ID = "ID"
    GENE = "GENE"


class NodeShape(Enum):
    """Node shapes understood by Cytoscape."""
    ELLIPSE = "ELLIPSE"
    ROUND_RECTANGLE = "ROUND_RECTANGLE"
    RECTANGLE = "RECTANGLE"
    TRIANGLE = "TRIANGLE"
    DIAMOND = "DIAMOND"
    HEXAGON = "HEXAGON"
    OCTAGON = "OCTAGON"
    PARALLELOGRAM = "PARALLELOGRAM"
    VEE = "VEE"


def normalize_color(color: Optional[str]) -> Optional[str]:
    """
    Normalize any matplotlib color to ``#RRGGBB``.

    Raises:
        ValueError: If ``color`` is not a valid color
    """
    if color is None:
        return None
    return mcolors.to_hex(color, keep_alpha=False).upper()


_COLOR_FIELDS = (
    "color_non_regulated",
    "highlight_color",
    "color_ratio_min",
    "color_ratio_max",
    "aligned_peptides_edge_color",
    "discarded_fill_color",
    "discarded_label_color",
    "multi_taxonomy_color",
)


@dataclass
class ColorConfig:
    """Colors and ratio-to-color bounds for the exported networks."""
    color_non_regulated: Optional[str] = "#D3D3D3"
    highlight_color: str = "#FF0000"
    color_ratio_min: str = "#0000FF"
    color_ratio_max: str = "#FFFF00"
    minimum_ratio_for_color: float = -2.0
    maximum_ratio_for_color: float = 2.0
    aligned_peptides_edge_color: str = "#00FF00"
    discarded_fill_color: str = "#EEEEEE"
    discarded_label_color: str = "#A9A9A9"
    multi_taxonomy_color: Optional[str] = None
    taxonomy_colors: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for name in _COLOR_FIELDS:
            setattr(self, name, normalize_color(getattr(self, name)))
        self.taxonomy_colors = {
            tax: normalize_color(color) for tax, color in self.taxonomy_colors.items()
        }
        self.minimum_ratio_for_color = float(self.minimum_ratio_for_color)
        self.maximum_ratio_for_color = float(self.maximum_ratio_for_color)


@dataclass
class ExportParameters:
    """
    Complete configuration for ``pcqnet export``.

    Mirrors the CLI argument structure for consistency.
    """
    output_folder: Path = Path(".")
    output_prefix: str = "pcq"
    output_suffix: str = ""
    condition1: str = "cond1"
    condition2: str = "cond2"
    remove_filtered_nodes: bool = False
    collapse_indistinguishable_proteins: bool = True
    collapse_indistinguishable_peptides: bool = True
    collapse_by_sites: bool = False
    collapse_by_ptms: bool = False
    apply_classifications_by_protein_pair: bool = True
    show_cases_in_edges: bool = False
    significant_fdr_threshold: Optional[float] = 0.05
    perform_ratio_integration: bool = True
    protein_label: ProteinNodeLabel = ProteinNodeLabel.ACC
    ptm_codes: List[str] = field(default_factory=list)
    annotation_columns: List[str] = field(default_factory=list)
    protein_node_shape: NodeShape = NodeShape.ROUND_RECTANGLE
    protein_node_height: int = 30
    protein_node_width: int = 70
    peptide_node_shape: NodeShape = NodeShape.ELLIPSE
    peptide_node_height: int = 30
    peptide_node_width: int = 30
    colors: ColorConfig = field(default_factory=ColorConfig)

    def __post_init__(self):
        self.output_folder = Path(self.output_folder)
        if isinstance(self.protein_label, str):
            self.protein_label = ProteinNodeLabel(self.protein_label.upper())
        if isinstance(self.protein_node_shape, str):
            self.protein_node_shape = NodeShape(self.protein_node_shape.upper())
        if isinstance(self.peptide_node_shape, str):
            self.peptide_node_shape = NodeShape(self.peptide_node_shape.upper())
        if isinstance(self.colors, dict):
            self.colors = ColorConfig(**self.colors)
        if self.significant_fdr_threshold is not None:
            self.significant_fdr_threshold = float(self.significant_fdr_threshold)

    @property
    def highlight_positions(self) -> bool:
        """Whether residue positions are emphasized in annotated sequences."""
        return self.collapse_by_sites or self.collapse_by_ptms


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    try:
        with open(config_path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            elif suffix == '.json':
                config = json.load(f)
            else:
                raise ValueError(
                    f"Unsupported config format: {suffix}. "
                    f"Use .yaml, .yml, or .json"
                )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def parameters_from_dict(config: Dict[str, Any], **overrides: Any) -> ExportParameters:
    """
    Build ``ExportParameters`` from a config mapping.

    Keyword ``overrides`` that are not None win over config values
    (explicit CLI arguments always override the file).

    Raises:
        ValueError: On unknown keys or invalid values
    """
    known = {f.name for f in fields(ExportParameters)}
    unknown = sorted(set(config) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    values = dict(config)
    for name, value in overrides.items():
        if name not in known:
            raise ValueError(f"Unknown configuration override: {name}")
        if value is not None:
            values[name] = value

    colors = values.get('colors')
    if isinstance(colors, dict):
        color_fields = {f.name for f in fields(ColorConfig)}
        unknown_colors = sorted(set(colors) - color_fields)
        if unknown_colors:
            raise ValueError(f"Unknown color configuration keys: {', '.join(unknown_colors)}")

    try:
        return ExportParameters(**values)
    except (TypeError, KeyError) as e:
        raise ValueError(f"Invalid export configuration: {e}") from e


def load_parameters(config_path: Optional[Path] = None, **overrides: Any) -> ExportParameters:
    """Load ``ExportParameters`` from an optional config file plus overrides."""
    config = load_config(config_path) if config_path is not None else {}
    return parameters_from_dict(config, **overrides)
