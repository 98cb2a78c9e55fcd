"""Output sinks."""

from folio.infra.sinks.html import HtmlOutputSink

__all__ = ["HtmlOutputSink"]
