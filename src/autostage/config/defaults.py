"""Default configuration values and starter .autostage.toml template."""

DEFAULT_TOML = """\
# autostage configuration
version = "1.0"

[stage]
enabled = true
delay_ms = 500              # quiet period before staging; 0 = stage immediately
max_file_size = 10485760    # bytes, 0 = no limit
trigger_mode = "manual"     # manual | all | edit-command-only

[filter]
# Python regular expressions, matched anywhere in the absolute path.
# Prefix an entry with "glob:" to use shell-style wildcards instead.
exclude_patterns = [
  '\\.tmp$',
  '\\.log$',
  '\\.swp$',
  '\\.swo$',
  '\\.DS_Store$',
  '(^|/)\\.git/',
  'node_modules/',
  '\\.min\\.js$',
  '\\.min\\.css$',
]
include_patterns = []       # empty = everything not excluded
restrict_to_dirs = []       # e.g. ["src/", "docs/"], relative to the repo root

[notify]
show_notifications = true
level = "info"              # debug | info | warning | error

[git]
executable = "git"
timeout = 30
"""
