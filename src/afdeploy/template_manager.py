"""ARM template parameterization.

Templates live under ``<project_root>/Asset/`` as JSON documents. Before a
template is deployed, the ``defaultValue`` of selected entries in its
``parameters`` section are replaced with generated names and sample
credentials. Which entries are patched depends on the template file name.

Template kinds:
    ArmTemplate.json: hostingPlanName, webSiteName, skuName, skuCapacity
    ArmTemplateVM.json: adminUsername, adminPassword

Any other template is returned exactly as loaded.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from afdeploy.config import DeployConfig
from afdeploy.exceptions import TemplateError
from afdeploy.naming import create_password, create_random_name, create_username

logger = logging.getLogger(__name__)

ASSET_DIR = "Asset"

WEB_APP_TEMPLATE = "ArmTemplate.json"
VM_TEMPLATE = "ArmTemplateVM.json"


def _web_app_values() -> dict[str, Any]:
    return {
        "hostingPlanName": create_random_name("hpRSAT"),
        "webSiteName": create_random_name("wnRSAT"),
        "skuName": "B1",
        "skuCapacity": 1,
    }


def _vm_values() -> dict[str, Any]:
    return {
        "adminUsername": create_username(),
        "adminPassword": create_password(),
    }


# Keyed by lower-cased file name
TEMPLATE_PARAMETERS: dict[str, Callable[[], dict[str, Any]]] = {
    WEB_APP_TEMPLATE.lower(): _web_app_values,
    VM_TEMPLATE.lower(): _vm_values,
}


class ArmTemplateParameterizer:
    """Load ARM templates and patch their parameter defaults."""

    def __init__(self, config: DeployConfig):
        self.config = config

    @property
    def asset_dir(self) -> Path:
        return self.config.project_root / ASSET_DIR

    def get_certificate_path(self, certificate_name: str) -> Path:
        return self.asset_dir / certificate_name

    def load(self, template_file: str) -> dict[str, Any]:
        """Read a template document.

        Raises:
            TemplateError: If the file is missing or is not a JSON object
        """
        path = self.asset_dir / template_file
        try:
            document = json.loads(path.read_text())
        except FileNotFoundError as e:
            raise TemplateError(f"Template not found: {path}") from e
        except json.JSONDecodeError as e:
            raise TemplateError(f"Invalid JSON in template {path}: {e}") from e
        except OSError as e:
            raise TemplateError(f"Failed to read template {path}: {e}") from e

        if not isinstance(document, dict):
            raise TemplateError(f"Template {path} must contain a JSON object")
        return document

    def parameterize(
        self, template_kind: str, values: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Load a template and fill in its parameter defaults.

        Args:
            template_kind: Template file name, matched case-insensitively
            values: Overrides for the generated values, by parameter name

        Returns:
            The patched template document

        Raises:
            TemplateError: If the template cannot be loaded, values names a
                parameter the template kind does not patch, or a known
                template lacks one of the parameters it must define
        """
        document = self.load(template_kind)

        generator = TEMPLATE_PARAMETERS.get(template_kind.lower())
        patched = generator() if generator is not None else {}
        unknown = set(values or {}) - set(patched)
        if unknown:
            raise TemplateError(
                f"Template {template_kind} has no patchable parameter(s): "
                f"{', '.join(sorted(unknown))}"
            )

        if generator is None:
            logger.debug(f"No parameters to patch for template {template_kind}")
            return document

        patched.update(values or {})

        parameters = document.get("parameters")
        if not isinstance(parameters, dict):
            raise TemplateError(f"Template {template_kind} has no parameters section")

        for name, value in patched.items():
            entry = parameters.get(name)
            if not isinstance(entry, dict):
                raise TemplateError(f"Template {template_kind} is missing parameters.{name}")
            entry["defaultValue"] = value

        return document

    def render(self, template_kind: str, values: dict[str, Any] | None = None) -> str:
        """Parameterize a template and serialize it as JSON text."""
        return json.dumps(self.parameterize(template_kind, values), indent=2)


__all__ = [
    "VM_TEMPLATE",
    "WEB_APP_TEMPLATE",
    "ArmTemplateParameterizer",
]
