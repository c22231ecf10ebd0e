import logging

from opentelemetry import trace


def setup_logging(log_level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    return logging.getLogger("jamf_objects")


def get_tracer(name: str):
    """Return a tracer from the globally configured provider (no-op without an SDK)."""
    return trace.get_tracer(name)
