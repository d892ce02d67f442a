"""
Meeting allocator: places a fixed catalog of meetings into time slots and rooms
with a multi-strategy greedy scheduler and an iterative repair search.
"""

__version__ = "2.0.0"
