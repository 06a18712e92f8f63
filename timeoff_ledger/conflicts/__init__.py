"""Conflict Detector module — overlapping time off across employees."""
