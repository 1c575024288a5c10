"""Secret redaction for log output and CI runners.

SecretMasker is a structlog processor that replaces every configured
secret value with a fixed marker before rendering. GitHubMaskEmitter
registers the same values with the GitHub Actions runner so they are
masked in workflow logs as well.
"""

import sys
from typing import Any, Iterable, List, Optional, TextIO

from structlog.typing import EventDict, WrappedLogger

REDACTED = "***REDACTED***"


def _unique_secrets(values: Iterable[Optional[str]]) -> List[str]:
    seen = set()
    secrets = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        secrets.append(value)
    # Longest first so a secret containing another is masked whole
    return sorted(secrets, key=len, reverse=True)


class SecretMasker:
    """Structlog processor that masks secret values in every string field.

    Nested dicts, lists and tuples are walked; other values pass through.
    """

    def __init__(self, secrets: Iterable[Optional[str]] = ()) -> None:
        self.secrets = _unique_secrets(secrets)

    def mask(self, value: Any) -> Any:
        if isinstance(value, str):
            for secret in self.secrets:
                if secret in value:
                    value = value.replace(secret, REDACTED)
            return value
        if isinstance(value, dict):
            return {k: self.mask(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self.mask(v) for v in value)
        return value

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        if not self.secrets:
            return event_dict
        return {key: self.mask(value) for key, value in event_dict.items()}


class GitHubMaskEmitter:
    """Emits ``::add-mask::`` workflow commands for secret values.

    ``emit()`` writes each secret once per instance; later calls are no-ops.
    The caller owns the instance and decides when (and whether) to call it.
    """

    def __init__(
        self, secrets: Iterable[Optional[str]], stream: Optional[TextIO] = None
    ) -> None:
        self.secrets = _unique_secrets(secrets)
        self._stream = stream
        self.emitted = False

    def emit(self) -> int:
        """Write the mask commands. Returns the number of lines written."""
        if self.emitted:
            return 0

        stream = self._stream or sys.stdout
        for secret in self.secrets:
            stream.write(f"::add-mask::{secret}\n")
        stream.flush()

        self.emitted = True
        return len(self.secrets)
