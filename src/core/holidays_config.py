from __future__ import annotations

import datetime as dt
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from src.core.errors import HolidayConfigError
from src.utils.time import to_date

log = logging.getLogger(__name__)


def _candidate_paths() -> list[Path]:
    explicit = os.environ.get("HOLIDAYS_FILE", "").strip()
    if explicit:
        return [Path(explicit)]
    paths = [Path("holidays.yaml")]
    home = Path(os.path.expanduser("~"))
    paths.append(home / ".dms" / "holidays.yaml")
    return paths


def parse_holidays(data: Any) -> frozenset[dt.date]:
    """
    Accepts either `{"holidays": [...]}` or a bare list. Items may be ISO date
    strings, dates, or mappings with a `date` key; anything else is skipped.
    """
    items = data.get("holidays") if isinstance(data, dict) else data
    out: set[dt.date] = set()
    for item in items or []:
        raw = item.get("date") if isinstance(item, dict) else item
        d = to_date(raw)
        if d is None:
            log.debug("Skipping unparseable holiday entry %r", item)
            continue
        out.add(d)
    return frozenset(out)


def load_config_holidays() -> tuple[frozenset[dt.date], Optional[str]]:
    for p in _candidate_paths():
        if not p.exists():
            continue
        try:
            data = yaml.safe_load(p.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise HolidayConfigError(f"Failed to read holidays file {p}: {e}") from e
        holidays = parse_holidays(data)
        log.info("Loaded %d holidays from %s", len(holidays), p)
        return holidays, str(p)
    return frozenset(), None
