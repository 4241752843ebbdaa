"""YAML front matter parsing and generation for page and snippet templates.

A template may start with a YAML header holding page attributes:

    ---
    title: About us
    listed: true
    editable_elements:
      'banner/title': Welcome
    ---
    {% extends index %}
    ...
"""

import re
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import FrontmatterError

# Liquid tag declaring the layout of a template
EXTENDS_PATTERN = re.compile(r'\{%-?\s*extends\s+["\']?([\w/-]+)["\']?\s*-?%\}')


class FrontmatterHandler:
    """Handles YAML front matter operations for templates."""

    # Regex pattern to match YAML front matter (between --- delimiters)
    FRONTMATTER_PATTERN = re.compile(
        r'^---\s*\n(.*?)\n---\s*\n',
        re.DOTALL
    )

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Validate that YAML structure depth doesn't exceed maximum.

        Raises:
            FrontmatterError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise FrontmatterError(
                "<yaml>",
                f"YAML structure exceeds maximum depth of {max_depth}"
            )

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @classmethod
    def parse(cls, file_path: str, content: str) -> Tuple[Dict[str, Any], str]:
        """Split a template into its front matter and its source.

        Args:
            file_path: Path to the file (for error messages)
            content: Full template content

        Returns:
            Tuple of (attributes, template source). Templates without front
            matter return ({}, content).

        Raises:
            FrontmatterError: If the front matter is not a valid YAML mapping
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, content

        try:
            attributes = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise FrontmatterError(
                file_path,
                f"Invalid YAML syntax: {str(e)}"
            )

        if attributes is None:
            attributes = {}

        if not isinstance(attributes, dict):
            raise FrontmatterError(
                file_path,
                f"Frontmatter must be a YAML dictionary, got {type(attributes).__name__}"
            )

        try:
            cls._validate_yaml_depth(attributes)
        except FrontmatterError as e:
            raise FrontmatterError(file_path, e.message)

        return attributes, content[match.end():]

    @classmethod
    def generate(cls, attributes: Dict[str, Any], source: str) -> str:
        """Prepend `attributes` as front matter to `source`.

        Empty and None values are left out; without any attribute the
        source is returned unchanged.
        """
        header = {
            key: value for key, value in attributes.items()
            if value is not None and value != '' and value != {} and value != []
        }
        if not header:
            return source or ''

        yaml_str = yaml.safe_dump(
            header,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )
        return f"---\n{yaml_str}---\n{source or ''}"

    @staticmethod
    def extract_layout(source: Optional[str]) -> Optional[str]:
        """Return the target of the `{% extends %}` tag of a template, if any."""
        if not source:
            return None
        match = EXTENDS_PATTERN.search(source)
        return match.group(1) if match else None
