"""
Web interface for the scheduling simulator
"""
