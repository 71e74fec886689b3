"""Per-repository logging context.

A RepoLogger is built once per sync engine invocation and handed to every
collaborator, so all records of one repository carry the same prefix and
`account`/`repository` extras.
"""

import logging
from typing import Any, MutableMapping, Tuple


class RepoLogger(logging.LoggerAdapter):
    """Logger adapter prefixing records with `[account] owner/repo:`.

    Example:
        >>> log = RepoLogger(logging.getLogger(__name__), "acme", "acme/widgets")
        >>> log.info("Starting sync process")
        # [acme] acme/widgets: Starting sync process
    """

    def __init__(self, logger: logging.Logger, account: str, repository: str):
        super().__init__(logger, {'account': account, 'repository': repository})
        self.account = account
        self.repository = repository

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return f"[{self.account}] {self.repository}: {msg}", kwargs
