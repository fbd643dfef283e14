"""Side log of raw accessory attributes (accessories_raw.ini)."""
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

from gerpaas.config import PARAM_COMMENT, PARAM_LEVEL, PARAM_MATERIAL
from gerpaas.services.ini_file import read_lines

logger = logging.getLogger("gerpaas-accessory")

UNKNOWN = "-"


def _num(value: float) -> str:
    # "0.##": at most two decimals, no trailing zeros
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _point(point: Sequence[float]) -> str:
    return "(" + ",".join(_num(v) for v in point) + ")"


def _text(value) -> str:
    if value is None:
        return UNKNOWN
    text = str(value).strip()
    return text or UNKNOWN


def accessory_record(element) -> List[str]:
    """The [Element_<id>] block for one accessory; each field is optional."""
    bbox = UNKNOWN
    if element.bounding_box is not None:
        low, high = element.bounding_box
        bbox = f"{_point(low)} - {_point(high)}"
    location = _point(element.location) if element.location is not None else UNKNOWN

    return [
        f"[Element_{element.element_id}]",
        f"Family = {_text(element.family_name)}",
        f"Type = {_text(element.type_name)}",
        f"BoundingBox = {bbox}",
        f"Location = {location}",
        f"Material = {_text(element.lookup(PARAM_MATERIAL))}",
        f"Comment = {_text(element.lookup(PARAM_COMMENT))}",
        f"Host = {_text(element.host_name)}",
        f"Level = {_text(element.lookup(PARAM_LEVEL))}",
        "",
    ]


class AccessoryLog:
    """
    Appends one section per accessory element. An element already present in
    the file is not written again. Write failures are logged and swallowed:
    the side log must never fail a sync run.

    The file is written immediately, outside the document transaction: a
    rolled-back run leaves its sections in place, and a later run skips those
    elements as already logged.
    """

    def __init__(self, path: Optional[Union[str, Path]]):
        self.path = Path(path) if path else None

    def _header(self) -> List[str]:
        return [
            "; ------------------------------------------",
            "; accessories_raw.ini  (auto-collected raw data)",
            f"; Created: {datetime.now():%Y-%m-%d %H:%M:%S}",
            "; ------------------------------------------",
            "",
        ]

    def record(self, element) -> bool:
        """Returns True when a new section was written."""
        if self.path is None:
            return False
        try:
            lines = read_lines(self.path) if self.path.exists() else self._header()
            block = accessory_record(element)
            if block[0] in lines:
                return False
            lines.extend(block)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except (OSError, UnicodeError) as e:
            logger.error(
                "Accessory log write failed: %s", e,
                extra={"element_id": element.element_id},
            )
            return False
        logger.info("Collected raw accessory info", extra={"element_id": element.element_id})
        return True
