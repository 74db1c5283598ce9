"""
Utility modules
"""

from .input_parser import InputParser, StdinCommandSource
from .visualization import Visualizer

__all__ = ['InputParser', 'StdinCommandSource', 'Visualizer']
