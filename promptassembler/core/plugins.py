# promptassembler/core/plugins.py
from abc import ABC, abstractmethod
from typing import Dict, List, Type
import importlib.metadata
from loguru import logger

from .models import FormatContext

class FormatterPlugin(ABC):
    """
    Base class for custom formatters selected with the "custom" preset.

    Subclasses are registered with @register_formatter or published under the
    "promptassembler.formatters" entry-point group, and picked by name through
    FormatConfig.custom_plugin.
    """
    name: str = "Unnamed Formatter"

    @abstractmethod
    def format(self, ctx: FormatContext) -> str:
        """Renders one code item. Must return a string."""

    @classmethod
    def description(cls) -> str:
        lines = (cls.__doc__ or "").strip().splitlines()
        return lines[0] if lines else ""

# --- Plugin Registry ---
_plugin_registry: Dict[str, Type[FormatterPlugin]] = {}

def register_formatter(cls: Type[FormatterPlugin]) -> Type[FormatterPlugin]:
    """Decorator or function to register a formatter plugin class."""
    if not isinstance(cls, type) or not issubclass(cls, FormatterPlugin):
        raise TypeError("Formatter plugin must inherit from FormatterPlugin")
    if not cls.name or cls.name == "Unnamed Formatter":
        raise ValueError(f"Formatter {cls.__name__} must define a unique 'name' attribute.")

    if cls.name in _plugin_registry:
        logger.warning(f"Formatter name conflict: '{cls.name}' already registered. Overwriting.")
    _plugin_registry[cls.name] = cls
    logger.debug(f"Registered formatter plugin: '{cls.name}'")
    return cls

def unregister_formatter(name: str) -> None:
    _plugin_registry.pop(name, None)

def load_plugins(entry_point_group="promptassembler.formatters") -> int:
    """Discovers and loads formatter plugins using importlib.metadata entry points."""
    logger.debug(f"Discovering formatter plugins using entry point group: '{entry_point_group}'")

    try:
        entry_points = importlib.metadata.entry_points(group=entry_point_group)
    except Exception as e:
        logger.error(f"Error accessing entry points for group '{entry_point_group}': {e}")
        entry_points = []

    loaded_count = 0
    for ep in entry_points:
        try:
            plugin_class = ep.load()
        except Exception as e:
            logger.exception(f"Failed to load formatter plugin from entry point {ep.name}: {e}")
            continue

        if not (isinstance(plugin_class, type) and issubclass(plugin_class, FormatterPlugin)):
            logger.warning(f"Entry point {ep.name} did not load a FormatterPlugin subclass.")
            continue

        plugin_name = getattr(plugin_class, 'name', None)
        if not plugin_name or plugin_name == "Unnamed Formatter":
            logger.error(f"Formatter class {plugin_class.__name__} from entry point {ep.name} lacks a valid 'name' attribute.")
        elif plugin_name in _plugin_registry:
            logger.warning(f"Formatter name conflict via entry point: '{plugin_name}' already registered. Skipping {ep.name}.")
        else:
            _plugin_registry[plugin_name] = plugin_class
            logger.info(f"Loaded formatter '{plugin_name}' from entry point '{ep.name}'")
            loaded_count += 1

    logger.debug(f"Loaded {loaded_count} formatter plugins via entry points. Total registered: {len(_plugin_registry)}")
    return loaded_count

def get_available_formatters() -> List[Type[FormatterPlugin]]:
    return list(_plugin_registry.values())

def get_formatter_by_name(name: str) -> Type[FormatterPlugin] | None:
    return _plugin_registry.get(name)
