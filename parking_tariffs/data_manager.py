import json
import logging
from pathlib import Path

from parking_tariffs.errors import InvalidInput
from parking_tariffs.models import TariffCatalog

logger = logging.getLogger(__name__)

DATA_DIR = Path("data")


def load_catalog(filename, data_dir=DATA_DIR):
    """Read a JSON array of tariff records. A missing file is an empty catalog."""
    path = Path(data_dir) / filename
    if not path.exists():
        logger.warning("Tariff file %s not found, using an empty catalog", path)
        return TariffCatalog()
    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise InvalidInput("catalog", f"{path} must hold a JSON array of tariff records")
    catalog = TariffCatalog.from_records(records)
    logger.info("Loaded %d tariffs from %s", len(catalog), path)
    return catalog
