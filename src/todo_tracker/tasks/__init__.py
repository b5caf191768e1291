"""
Task subsystem.

Components:
- task_models.py: data structures (Task, NewTask, Priority, TaskStatus)
- task_store.py: REST-backed store (PostgREST-style filters, partial updates)
- task_input.py: free-text parsing of "[P2] title date" input
- task_api.py: high-level operations shared by the CLI and the chat webhook
"""
