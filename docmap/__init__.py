"""Feature maps and annotation linting for annotated JS/TS sources."""

__version__ = "0.1.0"
