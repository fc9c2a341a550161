"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskFilter) + wire codec
- task_client.py: async REST client for the task collection
- task_evaluator.py: automatic (clock-driven) status transitions, pure
- task_board.py: the in-memory task collection owned by the app
- task_reconciler.py: polling loop that persists automatic transitions
- task_transitions.py: validated manual status changes
- task_views.py: quadrant / kanban / weekly groupings for display
- task_stats.py: planned-time report per category and per outcome status
"""
