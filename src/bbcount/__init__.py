"""bbcount — basal body counting on multi-series microscopy z-stacks."""

__version__ = "0.1.0"
