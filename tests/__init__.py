"""Test package for the rando search service"""
