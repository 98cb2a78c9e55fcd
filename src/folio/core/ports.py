from typing import Protocol, runtime_checkable

from folio.core.types import Collection, PublishReport


@runtime_checkable
class OutputStorage(Protocol):
    """Destination for rendered artifacts, addressed by relative POSIX path."""

    def clear(self) -> None:
        """Removes artifacts left by a previous run."""
        ...

    def write(self, relative_path: str, data: bytes) -> None: ...


@runtime_checkable
class OutputSink(Protocol):
    """Final destination for a published Collection."""

    def publish(self, collection: Collection) -> PublishReport: ...
