#!/usr/bin/env python3
import logging
import os


def _level_from_env(default: int = logging.INFO) -> int:
    level = logging.getLevelName(os.environ.get('SAVEDIT_LOG_LEVEL', '').upper())
    return level if isinstance(level, int) else default


logging.basicConfig(level=_level_from_env(), format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
log = logging.getLogger('savedit')
