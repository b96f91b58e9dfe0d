"""Record-mapping layer over the broker plug-in's embedded SQLite store."""

__version__ = "0.1.0"
