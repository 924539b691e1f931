from dataclasses import dataclass


@dataclass(frozen=True)
class Tooltip:
    """Name and full path of the hovered folder or file"""
    name: str
    path: str
