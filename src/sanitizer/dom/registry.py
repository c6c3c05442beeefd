# src/sanitizer/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Optional

from .core import RuleDefinition

logger = logging.getLogger(__name__)


class RewriteRegistry:
    """
    Central registry for the tag rewrite rules of the sanitizer.

    Dynamically discovers and loads RuleDefinition modules from the
    'sanitizer.dom.rules' package and keeps them sorted by their order.
    """

    _rules: List[RuleDefinition] = []
    _by_tag: Dict[str, List[RuleDefinition]] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Discovers and registers all rule definitions found in the 'sanitizer.dom.rules' package.

        Each module exposing a `DEFINITION` attribute (instance of `RuleDefinition`) is
        registered; modules without one are ignored.
        """
        if cls._loaded:
            return

        try:
            import sanitizer.dom.rules as rules_pkg

            found: List[RuleDefinition] = []
            for _, name, _ in pkgutil.iter_modules(rules_pkg.__path__):
                full_name = f"sanitizer.dom.rules.{name}"
                try:
                    module = importlib.import_module(full_name)
                except ImportError as e:
                    logger.error(f"Error loading rule module {name}: {e}")
                    continue

                defn = getattr(module, "DEFINITION", None)
                if isinstance(defn, RuleDefinition):
                    found.append(defn)
                    logger.debug(f"Rewrite rule loaded: {defn.name} ({', '.join(defn.tags)})")

            cls._rules = sorted(found, key=lambda d: d.order)
            cls._by_tag = {}
            for defn in cls._rules:
                for tag in defn.tags:
                    cls._by_tag.setdefault(tag, []).append(defn)
            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find rules package: {e}")

    @classmethod
    def get_rules(cls) -> List[RuleDefinition]:
        """Returns all rules in the order they must be applied."""
        cls.discover()
        return list(cls._rules)

    @classmethod
    def get_rules_for(cls, tag_name: str) -> List[RuleDefinition]:
        cls.discover()
        return list(cls._by_tag.get(tag_name, []))

    @classmethod
    def get_rule(cls, name: str) -> Optional[RuleDefinition]:
        cls.discover()
        for defn in cls._rules:
            if defn.name == name:
                return defn
        return None
