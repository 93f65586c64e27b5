from typing import Optional

from dtsgen.parser import parse_code
from dtsgen.settings import GeneratorSettings
from dtsgen.writer import format_module


def generate(
    code: str, module_name: str, settings: Optional[GeneratorSettings] = None
) -> str:
    """
    Render the declaration file of one JavaScript module.
    Fatal errors propagate as `GeneratorError` subclasses.
    """
    settings = settings or GeneratorSettings()
    module = parse_code(code, settings.module_name or module_name, settings.resolver)
    return format_module(module, settings.emitter)
