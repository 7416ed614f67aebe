# webcivil_scraper/utils/common.py
import asyncio
import random
import os
import re
import logging
from typing import Optional

logger = logging.getLogger(__name__)

async def random_delay(min_seconds=0.5, max_seconds=1.5, reason: Optional[str] = None):
    delay = random.uniform(min_seconds, max_seconds)
    if reason:
        logger.debug(f"Delaying for {delay:.2f}s: {reason}")
    else:
        logger.debug(f"Delaying for {delay:.2f}s")
    await asyncio.sleep(delay)

def case_folder_name(index_number: str) -> str:
    """'606529/2023' -> '606529-2023'"""
    return index_number.replace('/', '-')

def case_directory(base_dir: str, index_number: str) -> str:
    return os.path.join(base_dir, case_folder_name(index_number))

def agent_id_for(index_number: str) -> str:
    return f"scraper-{case_folder_name(index_number)}"

def sanitize_filename(name: str, default_name: str = "unnamed", max_length: int = 100) -> str:
    if not name:
        name = default_name
    name = re.sub(r'[<>:"/\\|?*]', '_', str(name))
    name = re.sub(r'[^\w\s.-]', '', name)
    name = re.sub(r'[-\s]+', '-', name).strip('-_')
    return name[:max_length] or default_name
