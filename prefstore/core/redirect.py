"""
Redirect text flow: load the stored text when a caller starts editing, commit it
on apply, and report OK to the invoker only when the commit reached storage.

The store is shared with other callers, so a value read by load() may be
replaced before apply() runs; the last successful commit wins.
"""

from __future__ import annotations

from prefstore.config.settings import settings
from prefstore.core.errors import CommitFailedError
from prefstore.core.models import ApplyOutcome, ResultCode
from prefstore.core.preferences import PreferenceStore
from prefstore.util.logger import get_logger


_log = get_logger("redirect")


class RedirectGetter:
    def __init__(
        self,
        store: PreferenceStore,
        *,
        store_name: str | None = None,
        key: str | None = None,
        failure_policy: str | None = None,
    ) -> None:
        self.store = store
        self.store_name = store_name or settings.redirect_store_name
        self.key = key or settings.redirect_text_key
        self.failure_policy = (failure_policy or settings.commit_failure_policy).strip().lower()
        if self.failure_policy not in {"silent", "report"}:
            raise ValueError(f"unknown commit failure policy: {self.failure_policy!r}")

    def load(self) -> str:
        """Current stored text, or an empty string when nothing was stored yet."""
        text = self.store.get(self.store_name, self.key, None)
        return text if text is not None else ""

    def apply(self, text: str) -> ApplyOutcome:
        committed = self.store.put(self.store_name, self.key, text)
        if committed:
            _log.info("redirect apply committed store=%s key=%s", self.store_name, self.key)
            return ApplyOutcome(result=ResultCode.OK, committed=True, text=text)
        if self.failure_policy == "report":
            raise CommitFailedError(f"could not persist {self.store_name}/{self.key}")
        _log.warning("redirect apply not committed, finishing without OK store=%s", self.store_name)
        return ApplyOutcome(result=ResultCode.CANCELED, committed=False, text=text)
