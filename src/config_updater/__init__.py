"""Config updater.

Polls a remote configuration document, replaces the local copy when it
changes, and runs operator hooks after updates and on failures. Designed
to run unattended inside a container.
"""

__version__ = "1.0.0"
