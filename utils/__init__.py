"""
Utility modules
"""

from .input_parser import InputParser
from .visualization import Visualizer, segments_from_graphic

__all__ = ['InputParser', 'Visualizer', 'segments_from_graphic']
