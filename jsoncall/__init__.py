"""
jsoncall - call envelope-speaking RPC services over raw TCP.
"""

from loguru import logger

__version__ = "0.1.0"
__logo__ = "⇄"

# Library logs stay quiet until the CLI (or the embedding application) enables them.
logger.disable("jsoncall")
