"""
FILE: taskflow/cli/commands/system.py
PURPOSE: System commands (version, repl)
"""

import typer

# Import shared objects from main module
# These will be available after main.py imports this module
from ..main import app, console, error_console, __version__


@app.command()
def version():
    """Show TaskFlow version."""
    console.print(f"TaskFlow v{__version__}")


@app.command()
def repl():
    """
    Launch interactive REPL mode.

    The REPL provides:
    - Command history (up/down arrows)
    - Autocomplete (Tab key)
    - Search, archived view and due-date sorting
    - Undo for bulk operations
    - Recurring tasks spawned in the background while it runs
    - Exit with Ctrl+D or type 'exit'

    Example:
        taskflow repl
    """
    # Import here to avoid loading REPL dependencies for one-shot commands
    from ...repl import main as repl_main

    try:
        repl_main()
    except Exception as e:
        error_console.print(f"[red]Error starting REPL:[/red] {e}")
        raise typer.Exit(1)
