"""tspress: Markdown docs from the exported types of TypeScript sources."""

__version__ = "0.1.0"
