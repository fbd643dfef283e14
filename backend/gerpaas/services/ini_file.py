"""Line-oriented INI reader for the GERPAAS parameter map."""
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

logger = logging.getLogger("gerpaas-ini")

_COMMENT_PREFIXES = ("#", ";")


class IniFile:
    """
    Sections of key = value pairs.

    Section names match case-insensitively; keys keep their case. A repeated
    key overwrites the earlier value. Keys before the first section header
    land in the global "" section.
    """

    def __init__(self, sections: Optional[Dict[str, Dict[str, str]]] = None):
        self._sections: Dict[str, Dict[str, str]] = sections or {}

    @classmethod
    def parse(cls, lines: Iterable[str]) -> "IniFile":
        sections: Dict[str, Dict[str, str]] = {}
        current = ""
        for raw in lines:
            line = raw.strip()
            if not line or line.startswith(_COMMENT_PREFIXES):
                continue
            if line.startswith("[") and line.endswith("]"):
                current = line[1:-1].strip().casefold()
                continue
            key, sep, value = line.partition("=")
            if not sep:
                continue
            sections.setdefault(current, {})[key.strip()] = value.strip()
        return cls(sections)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "IniFile":
        """Read a file; a missing file gives an empty IniFile."""
        path = Path(path)
        if not path.exists():
            return cls()
        return cls.parse(read_lines(path))

    def section(self, name: str) -> Dict[str, str]:
        return dict(self._sections.get(name.casefold(), {}))

    def read(self, key: str, section: str = "") -> Optional[str]:
        return self._sections.get(section.casefold(), {}).get(key)

    def __contains__(self, section: str) -> bool:
        return section.casefold() in self._sections


def read_lines(path: Path) -> List[str]:
    """UTF-8 (BOM tolerated), falling back to cp1251 for files saved by older tools."""
    try:
        return path.read_text(encoding="utf-8-sig").splitlines()
    except UnicodeDecodeError:
        logger.warning("%s is not UTF-8, reading as cp1251", path)
        return path.read_text(encoding="cp1251").splitlines()
