"""Wall-clock timing for renders.

``timer()`` wraps a block, measures it with ``time.perf_counter`` and hands
``(name, seconds)`` to a sink. The frame assembler times every render this
way; the CLI host times load + render + save.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

TimingSink = Callable[[str, float], None]


@contextmanager
def timer(name: str, sink: Optional[TimingSink] = None) -> Iterator[None]:
    """Time the enclosed block.

    Parameters
    ----------
    name : str
        Label passed to the sink
    sink : callable, optional
        ``sink(name, elapsed_seconds)``; a dict's ``__setitem__`` works.
        Without a sink the duration is logged at DEBUG.

    Notes
    -----
    The sink also runs when the block raises (cancelled or failed renders
    are timed too).

    Examples
    --------
    >>> timings = {}
    >>> with timer("render", sink=timings.__setitem__):
    ...     buffer = render(cfg, 640, 480)
    >>> timings["render"]  # doctest: +SKIP
    0.042
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        seconds = time.perf_counter() - t0
        if sink is None:
            logger.debug("%s took %.3f s", name, seconds)
        else:
            sink(name, seconds)
