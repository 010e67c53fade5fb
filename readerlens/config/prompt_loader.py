"""
YAML Prompt Loader.

Loads prompt templates from YAML files under readerlens/prompts/ and renders
them with a small template syntax.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml

logger = structlog.get_logger("config")

_IF_BLOCK = re.compile(r"\{\{#if\s+(\w+)\}\}(.*?)\{\{/if\}\}", re.DOTALL)
_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class PromptLoader:
    """Loads and caches prompt files."""

    def __init__(self, base_path: Optional[Path] = None):
        """
        Args:
            base_path: Directory holding the prompt YAML files.
                       Defaults to the prompts/ directory shipped with the package.
        """
        if base_path is None:
            base_path = Path(__file__).parent.parent / "prompts"

        self.base_path = Path(base_path)
        self._cache: Dict[str, Dict[str, Any]] = {}

    def get(self, path: str, key: Optional[str] = None) -> Any:
        """
        Get a whole prompt file or one (dotted) key from it.

        Args:
            path: File path without .yaml, e.g. "llm/analysis"
            key: Key inside the file, e.g. "system_prompt" or "user.custom_hint"
        """
        data = self._load_file(path)

        if key is None:
            return data

        result = data
        for k in key.split("."):
            if isinstance(result, dict) and k in result:
                result = result[k]
            else:
                raise KeyError(f"Key '{key}' not found in {path}.yaml")

        return result

    def render(self, path: str, key: str, **variables) -> str:
        """
        Render a template with variables.

        Syntax:
        - {{variable}} — substitution
        - {{#if flag}}...{{/if}} — kept only when flag is truthy

        Conditionals are resolved first, then placeholders are substituted in a
        single pass, so substituted values (document text in particular) are
        never scanned for template syntax again.
        """
        template = self.get(path, key)

        if not isinstance(template, str):
            raise TypeError(f"Expected string template, got {type(template)}")

        return self._render_template(template, variables)

    def _load_file(self, path: str) -> Dict[str, Any]:
        if path in self._cache:
            return self._cache[path]

        file_path = (self.base_path / f"{path}.yaml").resolve()

        if not str(file_path).startswith(str(self.base_path.resolve())):
            raise ValueError(f"Path traversal detected: {path}")

        if not file_path.exists():
            raise FileNotFoundError(f"Prompt file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        logger.debug("prompt_file_loaded", path=path)
        self._cache[path] = data
        return data

    def _render_template(self, template: str, variables: Dict[str, Any]) -> str:
        def replace_if(match):
            return match.group(2) if variables.get(match.group(1)) else ""

        result = _IF_BLOCK.sub(replace_if, template)

        def replace_var(match):
            value = variables.get(match.group(1))
            return "" if value is None else str(value)

        result = _PLACEHOLDER.sub(replace_var, result)
        return result.strip()

    def clear_cache(self):
        self._cache.clear()


_default_loader: Optional[PromptLoader] = None


def get_prompt_loader() -> PromptLoader:
    """Process-wide loader instance."""
    global _default_loader
    if _default_loader is None:
        _default_loader = PromptLoader()
    return _default_loader


def get_prompt(path: str, key: Optional[str] = None) -> Any:
    """Shortcut for get_prompt_loader().get()."""
    return get_prompt_loader().get(path, key)


def render_prompt(path: str, key: str, **variables) -> str:
    """Shortcut for get_prompt_loader().render()."""
    return get_prompt_loader().render(path, key, **variables)
