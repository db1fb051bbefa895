import asyncio
from pathlib import Path
from typing import Dict, Iterable

import aiofiles

from .logging_utils import get_module_logger


logger = get_module_logger("ConfigManager")


class ConfigManager:
    """Reads ``key = value`` config files.

    Lines starting with ``#`` are comments, trailing ``# ...`` is stripped from
    values and matching single or double quotes around a value are removed.
    Missing files yield an empty dict so callers can fall back to defaults.
    """

    @staticmethod
    def parse_lines(lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for line_num, raw_line in enumerate(lines, 1):
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                logger.warning("Ignoring config line %d (missing '='): %s", line_num, line)
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            if '#' in value:
                value = value.split('#', 1)[0].strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]

            config[key] = value

        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        if not await asyncio.to_thread(config_path.exists):
            logger.debug("Config file not found at %s, using defaults", config_path)
            return {}

        try:
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                lines = await f.readlines()
        except OSError as e:
            logger.error("Failed to read config %s: %s", config_path, e)
            return {}

        config = self.parse_lines(lines)
        logger.info("Loaded config from %s (%d values)", config_path, len(config))
        return config


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
