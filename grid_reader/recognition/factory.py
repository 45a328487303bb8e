"""
Text Recognizer Factory

Factory for creating text recognizer instances.
"""

import importlib
from typing import Dict, Type, Union

from .base import TextRecognizer


# Registry of available recognizers: "module.Class" paths load lazily,
# classes registered at runtime are stored directly
_RECOGNIZER_REGISTRY: Dict[str, Union[str, Type[TextRecognizer]]] = {
    "tesseract": "tesseract_engine.TesseractRecognizer",
}

# Cache for loaded recognizer classes
_RECOGNIZER_CACHE: Dict[str, Type[TextRecognizer]] = {}


def _load_recognizer_class(recognizer_type: str) -> Type[TextRecognizer]:
    """Lazily load a recognizer class by type."""
    if recognizer_type in _RECOGNIZER_CACHE:
        return _RECOGNIZER_CACHE[recognizer_type]

    entry = _RECOGNIZER_REGISTRY[recognizer_type]
    if isinstance(entry, str):
        module_name, class_name = entry.rsplit(".", 1)
        module = importlib.import_module(f".{module_name}", package=__package__)
        recognizer_class = getattr(module, class_name)
    else:
        recognizer_class = entry

    _RECOGNIZER_CACHE[recognizer_type] = recognizer_class
    return recognizer_class


def create_recognizer(recognizer_type: str = "tesseract", **config) -> TextRecognizer:
    """
    Create a text recognizer by type.

    Args:
        recognizer_type: Recognizer type identifier. Available types:
            - "tesseract" (default): Tesseract via pytesseract
        **config: Recognizer-specific configuration options, applied
            through configure(). For "tesseract": language, psm,
            tesseract_cmd, min_confidence, timeout_sec

    Returns:
        Configured TextRecognizer instance

    Raises:
        ValueError: If recognizer_type is not recognized

    Example:
        recognizer = create_recognizer("tesseract", language="eng")
        words = recognizer.recognize(image)
    """
    if recognizer_type not in _RECOGNIZER_REGISTRY:
        available = ", ".join(_RECOGNIZER_REGISTRY.keys())
        raise ValueError(f"Unknown recognizer type: {recognizer_type}. Available: {available}")

    recognizer = _load_recognizer_class(recognizer_type)()
    if config:
        recognizer.configure(**config)
    return recognizer


def register_recognizer(name: str, recognizer_class: type) -> None:
    """
    Register a custom recognizer type.

    Args:
        name: Recognizer type identifier
        recognizer_class: TextRecognizer subclass

    Raises:
        TypeError: If recognizer_class is not a TextRecognizer subclass
    """
    if not (isinstance(recognizer_class, type) and issubclass(recognizer_class, TextRecognizer)):
        raise TypeError(f"{recognizer_class} must be a subclass of TextRecognizer")
    _RECOGNIZER_REGISTRY[name] = recognizer_class
    _RECOGNIZER_CACHE.pop(name, None)


def available_recognizers() -> list:
    """
    List available recognizer types.

    Returns:
        List of registered recognizer type names
    """
    return list(_RECOGNIZER_REGISTRY.keys())
