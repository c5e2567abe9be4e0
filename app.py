import sys

from loguru import logger

from calloutdex.api import create_app
from calloutdex.config import settings
from calloutdex.index.factory import create_index

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Indexing callouts in vault {settings.resolved_vault_name()!r} at {settings.vault_path}")
index = create_index(settings)
app = create_app(index=index)
