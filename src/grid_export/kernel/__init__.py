"""Kernel – error hierarchy and text helpers shared by every layer."""
