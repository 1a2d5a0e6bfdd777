"""
Test suite for pyNUMLAB

Contains:
- tests/unit/          : Unit tests for individual subpackages
"""
