"""
AsteriTime client: Eisenhower-matrix tasks with an automatic status lifecycle.

The interesting part lives in `asteritime.tasks`; everything else wires it to a
REST backend, a console and a log file.
"""

__version__ = "0.3.0"
