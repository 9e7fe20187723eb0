"""
Tests for the character attribution engine.
"""
