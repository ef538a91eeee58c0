"""Load the rule tables and exemption policy from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .exemptions import ExemptionPolicy
from .tables import RuleTables
from .utils import load_mapping

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
TABLES_FILE = DATA_DIR / "tables.yaml"
EXEMPTIONS_FILE = DATA_DIR / "exemptions.yaml"
EXEMPTION_KEYS = ("exemptions", "restrictions")


@dataclass(frozen=True)
class AuditConfig:
    """Everything the rules consult besides the source itself."""

    tables: RuleTables = field(default_factory=RuleTables)
    policy: ExemptionPolicy = field(default_factory=ExemptionPolicy)


def load_config(*extra_paths: Union[str, Path]) -> AuditConfig:
    """Load the packaged tables and exemptions, then layer user files on top.

    A user file may carry table keys and ``exemptions``/``restrictions``
    entries side by side; tables are merged, exemption entries appended.
    """

    tables = RuleTables.from_config(load_mapping(TABLES_FILE))
    policy = ExemptionPolicy.from_config(load_mapping(EXEMPTIONS_FILE))
    for extra in extra_paths:
        path = Path(extra)
        data = load_mapping(path)
        if not data:
            logger.warning("Configuration file %s is missing or empty", path)
            continue
        logger.debug("Merging configuration from %s", path)
        table_data = {key: value for key, value in data.items() if key not in EXEMPTION_KEYS}
        if table_data:
            tables = tables.merged(table_data)
        policy = policy.merged(ExemptionPolicy.from_config(data))
    return AuditConfig(tables=tables, policy=policy)
