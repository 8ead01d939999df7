"""
FILE: taskflow/repl/commands/system.py
PURPOSE: View-state and system command handlers for REPL
"""

from rich.panel import Panel

from ..main import console, repl_context
from ..parser import ParseResult


def handle_search_command(result: ParseResult) -> None:
    """
    Handle 'search' command - filter listings by task text.

    Usage:
        search invoice
        search           # Clear the filter
    """
    query = result.text().strip()
    repl_context.query = query
    if query:
        console.print(f"✓ Showing tasks matching [yellow]{query}[/yellow]")
    else:
        console.print("✓ Cleared search")


def handle_sort_command(result: ParseResult) -> None:
    """
    Handle 'sort' command - choose due-date or manual order.

    Usage:
        sort due
        sort manual
        sort             # Toggle
    """
    if not result.args:
        repl_context.sort_by_due = not repl_context.sort_by_due
    else:
        mode = result.args[0].lower()
        if mode not in ("due", "manual"):
            console.print(f"[red]Error:[/red] Invalid sort mode '{mode}'")
            console.print("[dim]Valid modes: due, manual[/dim]")
            return
        repl_context.sort_by_due = mode == "due"

    if repl_context.sort_by_due:
        console.print("✓ Sorting by due date (overdue first)")
    else:
        console.print("✓ Manual order")


def handle_archived_command(result: ParseResult) -> None:
    """Handle 'archived' command - toggle between active and archived tasks."""
    repl_context.show_archived = not repl_context.show_archived
    if repl_context.show_archived:
        console.print("✓ Showing [magenta]archived[/magenta] tasks")
    else:
        console.print("✓ Showing active tasks")


def handle_help_command(result: ParseResult) -> None:
    """
    Handle 'help' command - show available commands.

    Args:
        result: Parsed command (unused)
    """
    help_text = """
[bold cyan]Tasks:[/bold cyan]

  [cyan]add <text> [--project <name>] [--recurring <cadence>] [--depends <ids>][/cyan]
                                Create a task (in the working project by default)
  [cyan]ls [--project <name>][/cyan]         List tasks in the current view
  [cyan]edit <id> <text>[/cyan]              Update task text
  [cyan]rm <id>[,<id>...][/cyan]             Delete task(s)
  [cyan]status <id>[/cyan]                   Cycle todo → progress → done
  [cyan]priority <id>[/cyan]                 Cycle low → medium → high
  [cyan]archive <id>[/cyan]                  Archive or restore a task
  [cyan]due <id> <when>[/cyan]               today, tomorrow, next-week, a weekday, YYYY-MM-DD or none
  [cyan]note <id> [<text>][/cyan]            Attach a note (no text removes it)
  [cyan]recur <id> <cadence> [--day <weekday>][/cyan]
                                daily, weekly, monthly or none
  [cyan]move <id> <target id>[/cyan]         Move a task into another task's slot

[bold cyan]View:[/bold cyan]

  [cyan]use <project>[/cyan]                 Set the working project ('use none' to clear)
  [cyan]search [<text>][/cyan]               Filter by text (no text clears it)
  [cyan]sort due|manual[/cyan]               Due-date order, overdue first
  [cyan]archived[/cyan]                      Toggle the archived view

[bold cyan]Workflow:[/bold cyan]

  [cyan]clear-completed[/cyan]               Remove finished, non-archived tasks
  [cyan]undo[/cyan]                          Undo the last clear-completed
  [cyan]stats[/cyan]                         Completion analytics
  [cyan]export [--output <file>][/cyan]      Markdown export
  [cyan]tick[/cyan]                          Check recurring tasks now

[bold cyan]Projects:[/bold cyan]

  [cyan]project add <name>[/cyan]            Create a project
  [cyan]project ls[/cyan]                    List projects
  [cyan]project rm <project>[/cyan]          Delete a project and its tasks
  [cyan]project rename <project> <name>[/cyan]
  [cyan]project color <project> <color>[/cyan]

  [cyan]help[/cyan]  [cyan]clear[/cyan]  [cyan]exit[/cyan]

[dim]Recurring tasks are checked in the background while the REPL runs.[/dim]
"""
    console.print(Panel(help_text, title="TaskFlow REPL Help", border_style="cyan"))


def handle_clear_command(result: ParseResult) -> None:
    """Clear the screen."""
    console.clear()
