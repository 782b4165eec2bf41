from __future__ import annotations

import logging
import re

from sonarstep.domain.models import BuildInfo
from sonarstep.services.build_listener import BuildListener

logger = logging.getLogger(__name__)

# Scanner < 2.x prints "you can browse", newer ones "you can find the results at:"
URL_PATTERN = re.compile(
    r"ANALYSIS SUCCESSFUL, you can (?:browse|find the results at:)\s+(\S+)"
)


def extract_sonar_url(log_text: str | None) -> str | None:
    if not log_text:
        return None
    matches = URL_PATTERN.findall(log_text)
    return matches[-1] if matches else None


def add_build_info(listener: BuildListener, installation_name: str) -> BuildInfo:
    # The URL is missing when the analysis failed or the log was not captured
    url = extract_sonar_url(listener.read_log())
    if url:
        logger.info("Analysis result available at %s", url)
    return BuildInfo(installation_name=installation_name, url=url)
