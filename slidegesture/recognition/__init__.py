"""Gesture recognition module."""
