"""Small demo exercising multi-index access on a large tensor."""

import logging
import sys

from densetensor import Tensor, build_index, build_shape

logger = logging.getLogger("densetensor")


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the root logger to write timestamped records to stdout."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> None:
    setup_logging()
    logger.info("Testing Tensor")

    with Tensor.create(build_shape([32, 100, 20, 30, 12])) as t:
        index = build_index([0, 99, 0, 2, 0])
        t.entry_set(index, 21.0)
        logger.info("t%s = %.3f (offset %d)", index, t.entry_get(index), t.entry(index))


if __name__ == "__main__":
    main()
