"""
Infrastructure constructs for Node.js Lambda functions.
"""

from .nodejs_function import NodejsFunctionConstruct, handler_name

__all__ = ["NodejsFunctionConstruct", "handler_name"]
