import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

audit_logger = logging.getLogger("app.audit")


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    root.setLevel(level.upper())

    # SQL echo is controlled through DB_ECHO, not through the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
