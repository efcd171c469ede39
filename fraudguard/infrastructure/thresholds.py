"""Client-local persistence of blacklist recommendation thresholds"""

import json
import logging
import os
import tempfile
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from fraudguard.config import settings
from fraudguard.domain.models import Thresholds

logger = logging.getLogger(__name__)

STORAGE_KEY = "blacklist_thresholds"


def _parse_int(value: Any) -> Optional[int]:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _parse_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


class ThresholdStore:
    """
    JSON file holding {"minComplaints": int, "highAmountThreshold": number}.

    Reads merge stored values over the defaults field by field; writes replace
    the whole file atomically. No range validation happens here.
    """

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = Path(path or settings.thresholds_path)

    def _read_raw(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Unreadable threshold file, using defaults", extra={"path": str(self.path), "error": str(e)})
            return {}
        if not isinstance(data, dict):
            logger.warning("Threshold file is not an object, using defaults", extra={"path": str(self.path)})
            return {}
        return data

    def get(self) -> Thresholds:
        defaults = Thresholds()
        data = self._read_raw()

        min_complaints = _parse_int(data.get("minComplaints"))
        if "minComplaints" in data and min_complaints is None:
            logger.warning("Ignoring unparseable minComplaints", extra={"value": repr(data["minComplaints"])})

        high_amount = _parse_decimal(data.get("highAmountThreshold"))
        if "highAmountThreshold" in data and high_amount is None:
            logger.warning("Ignoring unparseable highAmountThreshold", extra={"value": repr(data["highAmountThreshold"])})

        return Thresholds(
            min_complaints=defaults.min_complaints if min_complaints is None else min_complaints,
            high_amount_threshold=defaults.high_amount_threshold if high_amount is None else high_amount,
        )

    def set(self, thresholds: Thresholds) -> None:
        amount = Decimal(str(thresholds.high_amount_threshold))
        payload = {
            "minComplaints": int(thresholds.min_complaints),
            "highAmountThreshold": int(amount) if amount == amount.to_integral_value() else float(amount),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{STORAGE_KEY}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise
