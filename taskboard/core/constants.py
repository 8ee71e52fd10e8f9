"""Core constants: cache keys, upstream method names and protocol literals.

Single source of truth for values shared by infrastructure, application
and API layers.
"""

# Cache key prefixes
CACHE_PREFIX_DASHBOARD = "dashboard"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Upstream REST methods
METHOD_DEPARTMENT_GET = "department.get"
METHOD_USER_GET = "user.get"
METHOD_TASK_LIST = "tasks.task.list"
METHOD_BATCH = "batch"
METHOD_PROFILE = "profile"

# start=-1 asks the upstream to skip total-count computation
NO_COUNT_START = -1

# Keys the upstream may wrap a list response under, probed in order
LIST_WRAPPER_KEYS = ("tasks", "items", "result")

# Placeholder for tasks that arrive without a title
UNTITLED_TASK = "Untitled"

# Content type of the server-push endpoint
STREAM_MEDIA_TYPE = "text/event-stream"
