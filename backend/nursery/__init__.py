"""
Semisto Pépinière - Bestand und Bestellabwicklung
"""
__version__ = "1.0.0"
