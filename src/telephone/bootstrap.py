from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import Any, Dict, Union

from telephone.core.contracts import Registry
from telephone.core.exceptions import RegistryError
from telephone.core.logger import get_logger
from telephone.models.manifest import RegistryManifest
from telephone.registry import RegistryBuilder
from telephone.schema.parser import parse_param

log = get_logger(__name__)


def read_manifest_file(path: Union[str, Path]) -> Dict[str, Any]:
    manifest_file = Path(path)
    if not manifest_file.exists():
        raise FileNotFoundError(f"Manifest file not found: {path}")

    with open(manifest_file, "r") as f:
        if manifest_file.suffix == ".json":
            return json.load(f)
        if manifest_file.suffix in (".yaml", ".yml"):
            try:
                import yaml
            except ImportError:
                raise ImportError(
                    "PyYAML required for YAML manifests. "
                    "Install with: pip install pyyaml"
                )
            return yaml.safe_load(f) or {}
    raise ValueError(
        f"Unsupported manifest format: {manifest_file.suffix}. "
        "Use .json or .yaml"
    )


def load_manifest(source: Union[str, Path, Dict[str, Any], RegistryManifest]) -> Registry:
    """Import the modules named by a manifest and build a frozen registry.

    ``source`` may be a path to a JSON/YAML file, an already-loaded dict, or a
    validated RegistryManifest.
    """
    if isinstance(source, RegistryManifest):
        manifest = source
    elif isinstance(source, dict):
        manifest = RegistryManifest.model_validate(source)
    else:
        manifest = RegistryManifest.model_validate(read_manifest_file(source))

    builder = RegistryBuilder()
    for namespace, spec in manifest.namespaces.items():
        try:
            module = importlib.import_module(spec.module)
        except ImportError as exc:
            raise RegistryError(
                f"Cannot import module {spec.module!r} for namespace {namespace!r}", cause=exc
            ) from exc
        declarations = {
            name: [parse_param(p.name, p.type, p.optional) for p in params]
            for name, params in spec.functions.items()
        }
        builder.from_module(namespace, module, declarations)
        log.info(f"Registered {len(declarations)} function(s) for namespace {namespace!r}")

    return builder.freeze()
