"""
cbind

Lowers parsed C declarations into a target-agnostic type model for
foreign-binding generators.
"""

__version__ = "0.1.0"
__author__ = "cbind developers"

from .config import TranslatorConfig
from .errors import TranslationError
from .translator import Translator, TranslatorState

__all__ = ["Translator", "TranslatorConfig", "TranslatorState", "TranslationError", "__version__"]
