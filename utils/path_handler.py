#!/usr/bin/env python3
"""
Path template handling for documented operation paths.

The reference pages use OpenAPI style templates (``/lol/match/v4/matches/{matchId}``)
but occasionally show Express style segments (``/:matchId``). Both are
normalised to the OpenAPI form before parameters are extracted.
"""

import re
import logging
from typing import List
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class PathParameter:
    """Represents a path parameter found in a URL template."""
    name: str


class PathParameterHandler:
    """
    Extracts and normalises path parameters.
    """

    OPENAPI_PATTERN = re.compile(r'\{([a-zA-Z0-9_]+)\}')
    EXPRESS_PATTERN = re.compile(r'(?<=/):([a-zA-Z0-9_]+)')

    @classmethod
    def normalize(cls, path_template: str) -> str:
        """Rewrite Express style ``:param`` segments as ``{param}``."""
        return cls.EXPRESS_PATTERN.sub(r'{\1}', path_template)

    @classmethod
    def extract_parameters(cls, path_template: str) -> List[PathParameter]:
        """
        Extract all parameters from a path template, in path order.

        Args:
            path_template: URL path template with parameters

        Returns:
            List of PathParameter objects found in the path
        """
        parameters = []
        seen = set()

        for match in cls.OPENAPI_PATTERN.finditer(cls.normalize(path_template)):
            param_name = match.group(1)
            # A template may repeat a parameter; keep the first occurrence
            if param_name in seen:
                continue
            seen.add(param_name)
            parameters.append(PathParameter(name=param_name))

        return parameters
