import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from app.schemas.vehicle import VehicleCreate

logger = logging.getLogger(__name__)


def load_csv(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read the EV dataset CSV into wire-shaped records.

    Column headers are the record field names (Brand, Model, AccelSec, ...).
    Numeric columns are converted; values such as '-' become null.
    """
    with open(path, newline="", encoding="utf-8-sig") as f:
        rows = list(csv.DictReader(f))
    records = [VehicleCreate.model_validate(row).model_dump(by_alias=True) for row in rows]
    logger.info("Loaded %d records from %s", len(records), path)
    return records
