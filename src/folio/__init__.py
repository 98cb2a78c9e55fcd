"""folio - publishes front-matter Markdown articles as a static page set."""

__version__ = "0.1.0"
