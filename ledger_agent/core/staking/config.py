"""Known staking pool addresses per platform.

The built-in table can be replaced by a YAML file mapping platform names to
address lists, e.g.::

    TON_WHALES:
      - kQDV1LTU0sWojmDUV4HulrlYPpxLWSUjM6F3lUurMbwhales
    HIPO:
      - kQAlDMBKCT8WJ4nwdwNRp0lvKMP4vUnHYspFPhEnyR36cg44
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Union

import yaml

from .models import PlatformType

logger = logging.getLogger(__name__)


STAKING_POOL_ADDRESSES: Dict[PlatformType, List[str]] = {
    PlatformType.TON_WHALES: [
        "kQDV1LTU0sWojmDUV4HulrlYPpxLWSUjM6F3lUurMbwhales",
        "kQAHBakDk_E7qLlNQZxJDsqj_ruyAFpqarw85tO-c03fK26F",
    ],
    PlatformType.HIPO: [
        "kQAlDMBKCT8WJ4nwdwNRp0lvKMP4vUnHYspFPhEnyR36cg44",
    ],
}


def load_pool_addresses(path: Union[str, Path]) -> Dict[PlatformType, List[str]]:
    """Load a platform -> addresses table from YAML.

    Raises:
        ValueError: on an unknown platform name or a malformed entry
        FileNotFoundError: if the file does not exist
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Pool address file {path} must map platform names to address lists")

    table: Dict[PlatformType, List[str]] = {}
    for name, addresses in data.items():
        try:
            platform = PlatformType(str(name).upper())
        except ValueError as e:
            raise ValueError(f"Unknown staking platform in {path}: {name}") from e
        if not isinstance(addresses, list) or not all(isinstance(a, str) for a in addresses):
            raise ValueError(f"Addresses for {name} in {path} must be a list of strings")
        table[platform] = list(addresses)

    logger.debug(f"Loaded {sum(len(a) for a in table.values())} pool addresses from {path}")
    return table
