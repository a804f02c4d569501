import contextlib
import logging
import time
from typing import Optional


@contextlib.contextmanager
def transfer_timer(logger: logging.Logger, operation_name: str = "Transfer",
                   data_size: Optional[int] = None,
                   log_level: int = logging.INFO):
    """
    Context manager timing a socket transfer and logging its data rate.

    Args:
        logger: Logger instance to use for output
        operation_name: Name of the operation being timed (e.g., "Write", "Read")
        data_size: Optional size in bytes of the data being transferred
        log_level: Logging level to use for the timing message

    Example:
        with transfer_timer(log, "Write", len(payload)):
            info.write(payload, budget)
    """
    start_time = time.monotonic()
    try:
        yield
    finally:
        elapsed_time = time.monotonic() - start_time
        message = f"{operation_name} completed in {elapsed_time:.3f} seconds"

        if data_size and elapsed_time > 0:
            bytes_per_second = data_size / elapsed_time
            if bytes_per_second >= 1024 * 1024:
                rate_str = f"{bytes_per_second / (1024 * 1024):.2f} MiB/s"
            else:
                rate_str = f"{bytes_per_second / 1024:.2f} KiB/s"
            message += f" ({rate_str})"

        logger.log(log_level, message)
