"""targetgc - tracing garbage collector for Cargo target directories."""

__version__ = "0.3.0"
