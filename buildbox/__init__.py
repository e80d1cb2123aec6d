"""buildbox — resolve BUILD manifests and assemble container build sandboxes."""

__version__ = "0.1.0"
