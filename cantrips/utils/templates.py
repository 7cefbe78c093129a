"""
Template substitution for generated contracts and deployment modules
"""

import os
import re
import logging
from typing import Dict, Optional

from ..errors import TemplateError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "templates")
PLACEHOLDER = re.compile(r'#(\w+)#')


def render_template(template: str, replacements: Dict[str, object]) -> str:
    """Replaces #KEY# tokens; unknown keys are left as they are"""
    def substitute(match):
        value = replacements.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER.sub(substitute, template)


def apply_template(file_path: str, replacements: Dict[str, object], to_file_path: str,
                   templates_dir: Optional[str] = None):
    """
    Renders a template file into a target file

    Args:
        file_path: Template path, relative to the templates directory
        replacements: Values for the #KEY# placeholders
        to_file_path: Absolute path of the file to write
        templates_dir: Alternative templates directory
    """
    source = os.path.join(templates_dir or TEMPLATES_DIR, file_path)
    try:
        with open(source, 'r', encoding='utf-8') as f:
            template = f.read()
    except OSError as e:
        raise TemplateError(f"Could not read template {file_path}: {e}")

    try:
        os.makedirs(os.path.dirname(to_file_path), exist_ok=True)
        with open(to_file_path, 'w', encoding='utf-8') as f:
            f.write(render_template(template, replacements))
    except OSError as e:
        raise TemplateError(f"Could not write {to_file_path}: {e}")

    logger.debug(f"Rendered {file_path} into {to_file_path}")
