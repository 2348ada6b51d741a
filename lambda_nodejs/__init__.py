"""
Lambda NodeJS - Node.js Lambda function definitions with handler entry discovery.
"""

__version__ = "1.0.0"

from .config import FunctionConfig, load_function_config

__all__ = ["FunctionConfig", "load_function_config"]
