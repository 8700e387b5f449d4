import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """Konfiguriert den Root-Logger für die gesamte Anwendung."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # matplotlib protokolliert auf DEBUG den Font-Cache
    logging.getLogger("matplotlib").setLevel(max(level, logging.WARNING))
