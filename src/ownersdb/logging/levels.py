"""
HUMAN logging level -- readable progress lines.

Custom level between INFO (20) and WARNING (30). It does not indicate
severity: it marks the few events a CI log reader wants to see (which
ports changed, what is being downloaded, where the databases went)
without the technical noise.

Hierarchy:
    debug  (10) -> git commands, per-file counts, byte sizes
    info   (20) -> config loaded, fetcher created
    human  (25) -> * progress: scan start, downloads, files written
    warn   (30) -> skipped ports
    error  (40) -> fatal errors
"""

import logging

HUMAN = 25
logging.addLevelName(HUMAN, "HUMAN")


# Inject .human() into stdlib loggers so structlog can proxy "human" calls
def _human_method(self, message, *args, **kwargs):
    if self.isEnabledFor(HUMAN):
        self._log(HUMAN, message, args, **kwargs)


logging.Logger.human = _human_method
