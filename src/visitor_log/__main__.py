"""Allow ``python -m visitor_log``."""

from visitor_log.main import run

run()
