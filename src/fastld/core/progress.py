"""Shared progress bar utility for fastld.

Provides a progress iterator for streamed input where the number of
records is usually unknown up front. Writes to stderr so the LD report
on stdout stays clean.
"""

import sys
from collections.abc import Iterable, Iterator

import progressbar


def progress_iterator(
    iterable: Iterable, total: int | None = None, desc: str = ""
) -> Iterator:
    """Wrap iterator with progressbar2 progress display.

    With a known total the bar shows percentage and ETA; without one it
    shows a running counter, elapsed time and a spinner.

    The bar is finalized in a try/finally block so that early breaks or
    exceptions from the caller don't leave terminal output corrupted.

    Args:
        iterable: Iterable to wrap.
        total: Total number of items, or None if unknown.
        desc: Optional description prefix.

    Yields:
        Items from the wrapped iterable.
    """
    prefix = f"{desc}: " if desc else ""
    if total is None:
        widgets = [
            prefix,
            progressbar.Counter(),
            " ",
            progressbar.Timer(),
            " ",
            progressbar.AnimatedMarker(),
        ]
        max_value = progressbar.UnknownLength
    else:
        widgets = [
            prefix,
            progressbar.Counter(),
            f"/{total} ",
            progressbar.Percentage(),
            " ",
            progressbar.Bar(),
            " ",
            progressbar.Timer(),
            " ",
            progressbar.ETA(),
        ]
        max_value = total
    bar = progressbar.ProgressBar(max_value=max_value, widgets=widgets, fd=sys.stderr)
    bar.start()
    try:
        for i, item in enumerate(iterable):
            yield item
            bar.update(i + 1)
    finally:
        bar.finish()
