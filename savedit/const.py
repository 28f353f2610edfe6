"""
Constants for the savedit command line tool.
"""

# Path token meaning stdin (for inputs) or stdout (for outputs)
STDIO_TOKEN = '-'

# Editor selection
EDITOR_ENV = 'EDITOR'
DEFAULT_EDITOR = 'vim'

# Codec selection
CODEC_ENV = 'SAVEDIT_CODEC'
DEFAULT_CODEC = 'remnant2'

# Edit session temp file, suffix lets editors pick JSON highlighting
TEMP_SUFFIX = '.json'

# Resave debug dumps, written to the working directory
DEBUG_INPUT_NAME = 'input.sav'
DEBUG_OUTPUT_NAME = 'output.sav'

# JSON rendering
JSON_INDENT = 2
