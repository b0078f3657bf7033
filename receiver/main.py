import logging

import uvicorn

from receiver.api.app import create_app
from receiver.core.config import Settings
from receiver.core.file_storage import TempFileStorage
from receiver.services.cleanup import CleanupService

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the upload receiver."""
    config = Settings(_cli_parse_args=True)

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Ensuring tmp and data directories (%s and %s)", config.tmp_dir, config.data_dir)
    try:
        config.ensure_directories()
    except OSError as exc:
        raise SystemExit(f"Could not create directories: {exc}") from exc

    cleanup = CleanupService(TempFileStorage(config.tmp_dir))
    deleted = cleanup.delete_stale_temp_files(config.stale_tmp_hours)
    if deleted:
        logger.info("Removed %d stale temp files from %s", deleted, config.tmp_dir)

    app = create_app(config)
    logger.info("Starting server. Listening on http://%s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
