"""Utility modules for fastld."""

from fastld.utils.logging import (
    log_rss_memory,
    run_log_path,
    setup_logging,
    write_run_log,
)

__all__ = ["log_rss_memory", "run_log_path", "setup_logging", "write_run_log"]
