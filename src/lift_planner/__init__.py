"""
lift-planner: replay barbell training programs from recorded results.

Programs (GZCLP, 5/3/1 PPL, JAW blocks, ...) are data; a single engine
interprets them and recomputes every session from the start on each call.
"""

__version__ = "0.1.0"
