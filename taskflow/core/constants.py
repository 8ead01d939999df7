"""
FILE: taskflow/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - VALID_STATUSES / STATUS_CYCLE: Task status values and toggle order
  - VALID_PRIORITIES / PRIORITY_CYCLE: Priority values and toggle order
  - VALID_RECURRENCES / RECURRENCE_THRESHOLD_DAYS: Recurrence cadences
  - CREATION_PALETTE / PROJECT_PALETTE: Project color tags
  - STORAGE_KEY: Name of the persisted blob
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Single source of truth for enumerated values
  - Weekday indexes follow the Sunday=0 convention of the stored data
"""

# Task status constants
STATUS_TODO = "todo"
STATUS_PROGRESS = "progress"
STATUS_DONE = "done"
VALID_STATUSES = (STATUS_TODO, STATUS_PROGRESS, STATUS_DONE)
STATUS_CYCLE = {
    STATUS_TODO: STATUS_PROGRESS,
    STATUS_PROGRESS: STATUS_DONE,
    STATUS_DONE: STATUS_TODO,
}

# Priority constants
PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
VALID_PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH)
PRIORITY_CYCLE = {
    PRIORITY_LOW: PRIORITY_MEDIUM,
    PRIORITY_MEDIUM: PRIORITY_HIGH,
    PRIORITY_HIGH: PRIORITY_LOW,
}

# Recurrence constants
RECUR_DAILY = "daily"
RECUR_WEEKLY = "weekly"
RECUR_MONTHLY = "monthly"
VALID_RECURRENCES = (RECUR_DAILY, RECUR_WEEKLY, RECUR_MONTHLY)

# Minimum whole days since last recurrence before a successor is spawned
RECURRENCE_THRESHOLD_DAYS = {
    RECUR_DAILY: 1,
    RECUR_WEEKLY: 7,
    RECUR_MONTHLY: 30,
}

# Monthly recurrence is a fixed offset, not calendar-month arithmetic
MONTHLY_OFFSET_DAYS = 30

# Suffix marking ids of tasks spawned by the recurrence scheduler
RECURRING_ID_SUFFIX = "-recurring"

# Weekdays, Sunday=0
WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# Project colors: new projects draw from the creation palette,
# recolor accepts the full palette
CREATION_PALETTE = (
    "bg-blue-500",
    "bg-green-500",
    "bg-purple-500",
    "bg-red-500",
    "bg-yellow-500",
    "bg-pink-500",
    "bg-indigo-500",
)
PROJECT_PALETTE = CREATION_PALETTE + ("bg-teal-500", "bg-orange-500")

# Short names accepted by the CLI/REPL ("blue" -> "bg-blue-500")
COLOR_NAMES = {color.split("-")[1]: color for color in PROJECT_PALETTE}

# Persistence
STORAGE_KEY = "taskManagerData"

# Defaults
DEFAULT_RECURRENCE_INTERVAL = 60.0
DEFAULT_UNDO_DEPTH = 50
