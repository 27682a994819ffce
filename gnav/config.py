
import os
import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"
LOCAL_CONFIG_PATH = "./local.yaml"


def _load_yaml(path):
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _merge(base, override):
    merged = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = _merge(merged[k], v)
        else:
            merged[k] = v
    return merged


def get_config(default = False):
    """Load the packaged defaults, overlaid with a local config if one exists.

    The local file is taken from the GNAV_CONFIG environment variable, or
    ./local.yaml in the working directory.
    """
    cfg = _load_yaml(DEFAULT_CONFIG_PATH)
    if default:
        return cfg

    local_path = os.environ.get("GNAV_CONFIG", LOCAL_CONFIG_PATH)
    if not os.path.exists(local_path):
        return cfg

    try:
        local = _load_yaml(local_path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config {local_path}: {e}")
        return cfg

    return _merge(cfg, local)


cfg = get_config()

# Constants
GAP_CHAR = cfg["alignment"]["gap_char"]
MAX_FINE_MODE_BASES_PER_PIXEL = cfg["alignment"]["max_fine_mode_bases_per_pixel"]
MIN_GAP_LENGTH = cfg["alignment"]["min_gap_length"]
MERGE_PIXEL_DISTANCE = cfg["alignment"]["merge_pixel_distance"]
MIN_MERGE_DRAW_WIDTH = cfg["alignment"]["min_merge_draw_width"]

MARGIN = cfg["layout"]["margin"]
PX_PER_LABEL_CHAR = cfg["layout"]["px_per_label_char"]

REGION_EXPANSION = cfg["region"]["expansion"]
