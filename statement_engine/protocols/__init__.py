"""
Statement Protocol Handlers

Protocol implementations for electronic bank statements.
"""

from typing import List

__all__: List[str] = [
    "mt940",
]
