"""Apply the browser-upload CORS rules to the recordings bucket.

Usage: python scripts/configure_cors.py [origin ...]
Origins default to CORS_ALLOWED_ORIGINS.
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import get_settings  # noqa: E402
from app.services.storage import StorageConfigError, StorageError, build_cors_rules, get_object_store  # noqa: E402

logger = logging.getLogger("clip_portal")


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    origins = list(argv if argv is not None else sys.argv[1:]) or get_settings().CORS_ALLOWED_ORIGINS

    store = get_object_store()
    logger.info("Configuring CORS for bucket %s (origins: %s)", store.bucket, ", ".join(origins))
    try:
        store.put_cors(build_cors_rules(origins))
    except (StorageConfigError, StorageError) as e:
        logger.error("CORS configuration failed: %s", e)
        return 1

    logger.info("CORS configured")
    return 0


if __name__ == "__main__":
    sys.exit(main())
